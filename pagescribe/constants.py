"""Fixed values shared across the analysis and generation phases."""

# Elements considered by the page scan
CANDIDATE_SELECTOR = 'button, input, select, a, [role="button"]'

INTERACTIVE_TAGS = frozenset({"button", "a", "input", "select", "textarea"})
INTERACTIVE_ROLES = frozenset({"button", "link", "menuitem", "tab", "checkbox", "radio"})
FORM_TAGS = frozenset({"input", "select", "textarea", "button"})
NAVIGATIONAL_ROLES = frozenset({"link", "navigation"})

# Accessibility scoring
MAX_ACCESSIBILITY_SCORE = 100
MISSING_LABEL_PENALTY = 25
MISSING_ARIA_PENALTY = 15
POOR_CONTRAST_PENALTY = 20
ISSUE_MISSING_LABEL = "Missing accessible label"
ISSUE_MISSING_ARIA = "No ARIA attributes found"
ISSUE_POOR_CONTRAST = "Potential contrast issues"

# Form validation payloads
SAMPLE_VALID_INPUT = "test@example.com"
SAMPLE_INVALID_INPUT = "invalid-input"
PLACEHOLDER_INPUT = "test"
FORM_TYPES = frozenset({"input", "form"})

# Performance budgets (milliseconds)
PERFORMANCE_METRICS = ("FCP", "LCP", "CLS")
LOAD_TIME_BUDGET_MS = 3000
DOM_READY_BUDGET_MS = 1500
FIRST_PAINT_BUDGET_MS = 1000

# Artifacts
SNAPSHOT_DIR = "analysis"
SNAPSHOT_FILENAME = "analysis-results.json"
GENERATED_SUFFIX = "_test.py"
DEBUG_ENV_VAR = "PAGESCRIBE_DEBUG"
ARTIFACTS_DIR = "test-artifacts"
CONFTEST_FILENAME = "conftest.py"
SUITE_CONFIG_FILENAME = "pytest.ini"
AXE_CDN_URL = "https://cdnjs.cloudflare.com/ajax/libs/axe-core/4.10.2/axe.min.js"

# Browser defaults
DEFAULT_VIEWPORT_WIDTH = 1280
DEFAULT_VIEWPORT_HEIGHT = 800
DEFAULT_ELEMENT_WAIT_MS = 5000
NAVIGATION_ATTEMPTS = 3

# Generated suite runner
RERUNS_DELAY_SECONDS = 2

"""
Vocabulary shared by the analysis pipeline, the deterrent cascade and the
admin dashboards.
"""

# Report lifecycle
REPORT_PENDING = 'pending'
REPORT_COMPLETE = 'complete'
REPORT_FAILED = 'failed'
REPORT_STATUSES = (REPORT_PENDING, REPORT_COMPLETE, REPORT_FAILED)

# Severity bands and the base health score each one starts from
SEVERITY_LEVELS = ('none', 'low', 'medium', 'high', 'critical')
SEVERITY_HEALTH_SCORES = {
    'none': 100,
    'low': 85,
    'medium': 60,
    'high': 35,
    'critical': 10,
}

# Health penalty per detected item
DISEASE_PENALTY = 5
PEST_PENALTY = 3
ANIMAL_PENALTY = 2

# Scan analytic categories, in primary-detection priority order
CATEGORY_DISEASE = 'disease'
CATEGORY_INSECT = 'insect'
CATEGORY_WILDLIFE = 'wildlife'
CATEGORY_HEALTHY = 'healthy'
SCAN_CATEGORIES = (CATEGORY_DISEASE, CATEGORY_INSECT, CATEGORY_WILDLIFE, CATEGORY_HEALTHY)

# Activity log actions
ACTION_DETECTION = 'detection'
ACTION_IRRIGATION = 'irrigation'
ACTION_DETERRENT = 'deterrent'
ACTION_SYSTEM = 'system'
ACTIVITY_ACTIONS = (ACTION_DETECTION, ACTION_IRRIGATION, ACTION_DETERRENT, ACTION_SYSTEM)

# Animal detection lifecycle
DETECTION_DETECTED = 'detected'
DETECTION_DETERRED = 'deterred'

DETECTION_SOURCE_ANALYSIS = 'analysis'
DETECTION_SOURCE_MANUAL = 'manual'
DETECTION_SOURCE_SIMULATED = 'simulated'

# Placeholder shown on the admin dashboard. Not measured: a real accuracy
# figure needs ground-truth labels compared against predictions.
ACCURACY_RATE_PLACEHOLDER = 95.2

RECENT_SCANS_LIMIT = 10
AUTOMATION_WINDOW_HOURS = 24

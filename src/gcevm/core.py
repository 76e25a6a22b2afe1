# Backoff for instance creation
# usage: delay for attempt n is uniform(0, min(MAX, INITIAL * MULTIPLIER ** (n - 1)))
RETRY_INITIAL_DELAY = 10.0
RETRY_MULTIPLIER = 3.0
RETRY_MAX_DELAY = 300.0
DEFAULT_RETRY_COUNT = 5

# Keys shared between the setup and teardown invocations
STATE_AUTO_DELETE = "auto-delete"
STATE_INSTANCE = "instance"

# Outputs published for later steps
OUTPUT_INSTANCE_NAME = "instance_name"
OUTPUT_INSTANCE_IP = "instance_ip"

# gcloud reads these to attribute API usage to this action
METRICS_ENVIRONMENT_VAR = "GCLOUD_GCE_METRICS_ENVIRONMENT"
METRICS_ENVIRONMENT_VERSION_VAR = "GCLOUD_GCE_METRICS_ENVIRONMENT_VERSION"
METRICS_ENVIRONMENT = "github-actions-gce-instance"

# Prefix used when reporting a failed step
ACTION_NAME = "gcevm"

"""Constants for the Adaptive Fade integration."""

DOMAIN = "adaptive_fade"

# Services
SERVICE_FADE_OUT = "fade_out"
SERVICE_RESTORE = "restore"
SERVICE_REPORT = "report"
SERVICE_UPDATE_ADAPTIVE_STATE = "update_adaptive_state"

# Service attributes
ATTR_DURATION = "duration"
ATTR_BUFFER = "buffer"
ATTR_MANUAL_OVERRIDE = "manual_override"
ATTR_PROFILE = "profile"
ATTR_FADE_DURATION = "fade_duration"

# Device capabilities
CAPABILITY_ONOFF = "onoff"
CAPABILITY_DIM = "dim"
CAPABILITY_LIGHT_TEMPERATURE = "light_temperature"

# Device classes
DEVICE_CLASS_LIGHT = "light"

# Storage
STORAGE_KEY = f"{DOMAIN}.state"
STORAGE_VERSION = 1
STORAGE_SAVE_DELAY_S = 10

# Key formats in the shared key-value store
KEY_SAVED_DIM = "{device_id}_SavedDim"
KEY_SAVED_TEMP = "{device_id}_SavedTemp"
KEY_SCRIPT_FADE_UNTIL = "{device_id}_FadeActiveUntil"
KEY_ADAPTIVE_FADE_UNTIL = "AL_Fade_{device_id}"
KEY_DEVICE_STATES = "AL_DeviceStates"

# Option keys
OPTION_FADE_DURATION = "fade_duration"
OPTION_FADE_BUFFER = "fade_buffer"
OPTION_NOTIFY_ON_FAILURE = "notify_on_failure"
OPTION_LOG_LEVEL = "log_level"

# Log levels (matching Python logging module)
LOG_LEVEL_WARNING = "warning"
LOG_LEVEL_INFO = "info"
LOG_LEVEL_DEBUG = "debug"
DEFAULT_LOG_LEVEL = LOG_LEVEL_WARNING

# Defaults (used when options are not set)
DEFAULT_FADE_DURATION = 20  # seconds
DEFAULT_FADE_BUFFER = 2  # seconds
DEFAULT_NOTIFY_ON_FAILURE = True

# Grace period added to fades started by adaptive control (seconds)
ADAPTIVE_FADE_BUFFER = 5

# Brightness at or below which a light counts as already off (0-1 scale)
NEAR_OFF_THRESHOLD = 0.05

# Home Assistant brightness scale
HA_MAX_BRIGHTNESS = 255

# Notification for fades that could not be started on every light
NOTIFICATION_ID = "adaptive_fade_degraded"

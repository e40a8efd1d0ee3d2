"""Web server configuration and shared resources."""

import pytz

from my_config import get_config

CONFIG = get_config()

# Server configuration constants
USE_DEBUG_MODE = CONFIG.web_server_debug_mode_on
WEB_SERVER_PORT = CONFIG.web_server_port

# Timezone used for naive deadlines and log timestamps
LOCAL_TZ = pytz.timezone(CONFIG.countdown_timezone)

# Deadline used by the index route when no date is given
DEFAULT_DEADLINE = '2019-10-18'

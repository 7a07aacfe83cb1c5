"""All magic values live here — no inline literals anywhere else."""

# HTTP surface
ANALYZE_ROOM_PATH = "/api/analyze-room"
HEALTH_PATH = "/healthz"
MAX_BODY_BYTES = 10 * 1024 * 1024
DEFAULT_ROOM_TYPE = "living room"
DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 8000
DEFAULT_BACKEND_URL = "http://127.0.0.1:8000"
DEFAULT_REQUEST_TIMEOUT = 120
DISCLAIMER = "Estimates are averages and not contractor quotes."

# Upload encoding: long edge cap (px) and JPEG quality (0-100)
UPLOAD_MAX_EDGE = 600
UPLOAD_JPEG_QUALITY = 60

# Persistence
DEFAULT_ANALYSIS_STORE_PATH = ".analyses.jsonl"

# Server log / error messages
MSG_SERVER_STARTING = "Starting analysis server on %s:%s"
MSG_ANALYSIS_START = "Starting room analysis (image %d chars, manual type: %s)"
MSG_ANALYSIS_TYPE = "Analyzing room with type: %s"
MSG_ANALYSIS_DONE = "Generated %d renovation scenarios for %s"
MSG_ANALYSIS_STORED = "Analysis %s stored (%s)"
MSG_ANALYSIS_FAILED = "Failed to analyze room"
MSG_ERR_BODY_TOO_LARGE = "Request body exceeds %d bytes"
MSG_ERR_INVALID_CONTENT_LENGTH = "Invalid Content-Length header"
MSG_ERR_GENERATION = "Renovation analysis failed: %s"
MSG_ERR_PERSISTENCE = "Could not store analysis: %s"
MSG_ERR_NO_PROVIDER = "ANTHROPIC_API_KEY or OPENAI_API_KEY must be set in .env"

# Structured generation
CLAUDE_ANALYSIS_MODEL = "claude-opus-4-6"
OPENAI_ANALYSIS_MODEL = "gpt-4o"
ANALYSIS_MAX_TOKENS = 2048
ANALYSIS_SCHEMA_NAME = "RoomAnalysis"
ANALYSIS_SCHEMA_DESCRIPTION = "Room analysis with renovation scenarios"
ANALYSIS_TOOL_NAME = "record_room_analysis"
DEFAULT_IMAGE_MEDIA_TYPE = "image/jpeg"
ANALYSIS_PROMPT = (
    "This is a %s. Generate exactly 3 renovation scenarios with realistic US cost estimates:\n"
    "1. Budget Refresh - Basic updates, minimal costs\n"
    "2. Mid-Range Remodel - Moderate upgrades, balanced quality\n"
    "3. Premium Upgrade - High-end finishes, maximum value\n"
    "\n"
    "For each scenario provide:\n"
    '- name (exact match: "Budget Refresh", "Mid-Range Remodel", "Premium Upgrade")\n'
    "- totalCostMin and totalCostMax (USD, realistic ranges)\n"
    "- materialsCost and laborCost (USD)\n"
    "- timeEstimate (days or weeks format)\n"
    "- permitLikelihood (Low/Medium/High)\n"
    "- valueImpact (percentage as number, e.g., 5 for 5%%)\n"
    "- roiRating (Low/Medium/High)\n"
    "- description (brief description)\n"
    "\n"
    "Return as JSON with roomType and scenarios array."
)

# Client: capture flow
MSG_ALREADY_PROCESSING = "Already processing, ignoring tap"
MSG_PICK_CANCELLED = "%s pick cancelled by user"
MSG_PERMISSION_TITLE = "Permission Required"
MSG_CAMERA_PERMISSION = "Camera permission is required to take photos"
MSG_GALLERY_PERMISSION = "Gallery permission is required to choose photos"
MSG_ERROR_TITLE = "Error"
MSG_CAPTURE_FAILED = "Failed to capture photo. Please try again."
MSG_SELECT_FAILED = "Failed to select photo. Please try again."
MSG_IMAGE_UNREADABLE = "Could not read image data"

# Client: analysis session
MSG_REQUEST_FAILED = "Request failed with status %d"
MSG_ANALYZE_FAILED = "Failed to analyze the room. Please try again."
MSG_INVALID_RESPONSE = "Received an invalid analysis from the server. Please try again."
MSG_LOADING = "Analyzing your room...\nOur AI is detecting the room type and calculating renovation estimates"
MSG_ERROR_HEADER = "Analysis Failed"
MSG_ROOM_TYPE_LABEL = "DETECTED ROOM TYPE"
MSG_SCENARIOS_HEADER = "Renovation Scenarios"
ROI_BADGES = {"High": "🟢", "Medium": "🟡", "Low": "⚪"}

# Telegram host
TELEGRAM_ACTION_INTERVAL: float = 4.0
CMD_START = "start"
CMD_HELP = "help"
CMD_CANCEL = "cancel"
CALLBACK_CAMERA = "capture:camera"
CALLBACK_GALLERY = "capture:gallery"
CALLBACK_RETRY = "analysis:retry"
BUTTON_CAMERA = "📷 Take Photo"
BUTTON_GALLERY = "🖼 Choose from Gallery"
BUTTON_RETRY = "Try Again"
MSG_BOT_STARTING = "Starting Telegram bot…"
MSG_BLOCKED_CHAT = "Blocked update from chat_id: %s"
MSG_SEND_CAMERA = "Send a photo of the room — open the attachment menu and pick Camera."
MSG_SEND_GALLERY = "Send a photo of the room from your gallery."
MSG_PICK_FIRST = "Tap one of the buttons below first, then send your photo."
MSG_WELCOME = (
    "Renovation Reality Check\n"
    "\n"
    "Photograph a room and get three renovation scenarios with cost ranges,\n"
    "timelines, permit likelihood and ROI.\n"
    "\n"
    "Commands:\n"
    "  /start   — show this message\n"
    "  /cancel  — cancel the current photo pick\n"
    "\n"
    "Tip: add a caption (kitchen, bathroom, living room, bedroom)\n"
    "to set the room type yourself.\n"
    "\n"
    "Estimates are averages and not contractor quotes."
)

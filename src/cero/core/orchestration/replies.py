CLARIFY = "I didn't understand you, could you repeat?"
SIGN_IN = "Please sign in on the web to continue."
TAKING_LONGER = "I'm taking a bit longer than usual, could you repeat that?"
NO_CANDIDATES = "Sorry, I couldn't process your request."
SERIOUS_TROUBLE = "Sorry, I'm having serious technical trouble right now."
BRAIN_ERROR = "Sorry, there was an error connecting to my brain."
EMPTY_AFTER_CLEANUP = "I'm sorry, I had a problem."
TECHNICAL_ERROR = "A technical error occurred."
NOT_CONFIGURED = "Configuration error: the language model is not configured on the server."

ACTION_NOT_RECOGNIZED = "Action not recognized."
MISSING_EVENT_TIMES = "Error: I couldn't understand the start or end date and time. Please repeat it."
NO_UPCOMING_EVENTS = "There are no upcoming events."
NO_PENDING_TASKS = "There are no pending tasks."

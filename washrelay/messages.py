"""User-facing message texts."""

HELP = (
    "👋 Smart laundry\n"
    "Commands:\n"
    "\"use A1\" → register yourself as the user of A1\n"
    "\"pickup A1\" → release A1 after collecting your laundry\n"
)

REGISTER_USAGE = "Please include a machine number, e.g. \"use A1\"."
RELEASE_USAGE = "Please include a machine number, e.g. \"pickup A1\"."

REGISTERED = (
    "✅ You are registered for washing machine {machine_id}. "
    "We will notify you when the sensor detects it has started."
)
STARTED = "🌀 Washing machine {machine_id} you registered for has started."
FINISHED = (
    "✅ Washing machine {machine_id} has finished, please collect your laundry soon.\n"
    "{note}"
    "After collecting, send \"pickup {machine_id}\"."
)
RELEASED = "✅ Confirmed you collected your laundry from {machine_id}. The machine is now free."

NO_RECORD = "No record found for washing machine {machine_id}. Send \"use {machine_id}\" first."
NOT_OWNER = "❌ Washing machine {machine_id} is not registered to you, so it cannot be released."
NOT_FINISHED = (
    "⏳ Washing machine {machine_id} is currently {status}. "
    "It can be released once the cycle has finished."
)

BROADCAST_FINISHED = "ℹ️ Washing machine {machine_id} has finished and is waiting for collection."
BROADCAST_IDLE = "ℹ️ Washing machine {machine_id} is now free."

REGISTER_FAILED = "Could not save your registration, please try again later."
RELEASE_FAILED = "Could not update the machine record, please try again later."

STATUS_LABELS = {
    "idle": "idle",
    "waiting_start": "waiting to start",
    "running": "running",
    "finished_wait": "finished",
}

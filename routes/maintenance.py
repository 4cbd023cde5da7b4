import azure.functions as func
import logging
from services.otp_service import cleanup_expired_otps

logger = logging.getLogger(__name__)
bp = func.Blueprint()


@bp.function_name(name="CleanupExpiredOtps")
@bp.timer_trigger(schedule="0 0 * * * *", arg_name="timer", run_on_startup=False)
def cleanup_otps(timer: func.TimerRequest) -> None:
    """Hourly sweep of expired one-time codes; used codes are kept until they expire."""
    if timer.past_due:
        logger.info("OTP cleanup timer is past due")
    try:
        removed = cleanup_expired_otps()
        logger.info(f"Removed {removed} expired OTP token(s)")
    except Exception:
        logger.exception("OTP cleanup failed")
        raise

# tourdesk/routers/users.py

from fastapi import APIRouter, Depends

from tourdesk.deps import get_store, require_admin
from tourdesk.logging_config import get_logger
from tourdesk.schemas_pkg.auth import UpdatePasswordRequest
from tourdesk.services.auth_service import update_password
from tourdesk.storage import RecordStore

logger = get_logger(__name__)

router = APIRouter(tags=["Users"])


@router.post("/update-password")
def admin_update_password(
    body: UpdatePasswordRequest,
    store: RecordStore = Depends(get_store),
    current_user: dict = Depends(require_admin),
):
    """Set a user's password. Always stored with the current scheme."""
    user = update_password(store, body.email, body.password, actor_id=current_user.get("sub"))
    logger.info("password_updated", user_id=user.get("id"), actor_id=current_user.get("sub"))
    return {"success": True, "message": "Password updated successfully"}

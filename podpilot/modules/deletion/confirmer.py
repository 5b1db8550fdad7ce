import logging
from typing import Optional

from ..lifecycle.errors import DeletionMismatch
from ..lifecycle.interfaces import LifecycleClient
from ..lifecycle.models import DeleteParams, DeletionResult, Immediate, Pending

logger = logging.getLogger(__name__)


async def delete_and_confirm(
    client: LifecycleClient, name: str, params: Optional[DeleteParams] = None
) -> DeletionResult:
    """
    Delete the pod and check the server deleted the one we asked for.

    Pending results are returned as is; callers needing certainty of
    removal must watch for it themselves.

    Raises:
        DeletionMismatch: The returned pod has a different name
    """
    result = await client.delete(name, params or DeleteParams())

    if isinstance(result, Immediate):
        if result.handle.name != name:
            logger.critical(f"Asked to delete {name} but server returned {result.handle.name}")
            raise DeletionMismatch(expected=name, actual=result.handle.name)
        logger.info(f"Deleted {name}")

    elif isinstance(result, Pending):
        logger.info(f"Deletion of {name} accepted: {result.status.get('status', 'pending')}")

    return result

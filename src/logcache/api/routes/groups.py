"""Log group 목록 엔드포인트."""

from fastapi import APIRouter, Depends

from logcache.api.deps import get_group_lister
from logcache.services.protocols import LogGroupLister

router = APIRouter()


@router.get("/log-groups")
def list_log_groups(lister: LogGroupLister = Depends(get_group_lister)):
    return lister.list_groups()

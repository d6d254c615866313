from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from tasktimer.database import get_db
from tasktimer.models import User
from tasktimer.schemas.dashboard import DashboardStats
from tasktimer.services.stats import get_stats
from tasktimer.utils.auth import get_current_user

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/stats", response_model=DashboardStats)
def dashboard_stats(db: Session = Depends(get_db), user: User = Depends(get_current_user)):
    return get_stats(db, user)

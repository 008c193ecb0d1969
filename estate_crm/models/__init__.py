from .user import User
from .agent import Agent
from .user_role import UserRole
from .lead import Lead
from .lead_activities import LeadActivity
from .property import Property

__all__ = ["User", "Agent", "UserRole", "Lead", "LeadActivity", "Property"]

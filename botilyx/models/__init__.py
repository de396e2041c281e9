# botilyx/models/__init__.py
from .user import User
from .family_group import FamilyGroup, FamilyProfile
from .medication import Medication, NotificationSettings
from .treatment import Treatment, TreatmentMedication, TreatmentImage
from .notification import Notification, NotificationPreferences, PushSubscription
from .shopping_list import ShoppingList, ShoppingItem
from .audit_log import AuditLog

from app.models.tenant import Tenant
from app.models.user import User, Membership, MembershipRole
from app.models.permission import Permission, RolePermission
from app.models.client import Client, ClientBranch
from app.models.product import Product, ProductTemplate, GENERIC_PRODUCT_SKU
from app.models.quote import (
    Quote, QuoteItem, QuoteAdditionalCharge, QuoteStatusHistory, QuoteStatus,
    LEGACY_STATUS_ALIASES,
)
from app.models.employee import Employee, EmployeeSchedule, EmployeeAdvance, DayType
from app.models.invitation import Invitation, InvitationState

from app.schemas.common import Number, OkResponse, PageMeta
from app.schemas.quote import (
    QuoteItemInput, AdditionalChargeInput, QuoteCreate, QuoteUpdate, QuoteStatusChange,
    PublicLinkToggle, QuoteItemRead, AdditionalChargeRead, QuoteRead, QuoteListResponse,
    PublicLinkRead, QuoteStatusHistoryRead, PublicQuoteRead,
)
from app.schemas.client import (
    ClientCreate, ClientUpdate, ClientRead, ClientListResponse,
    BranchCreate, BranchUpdate, BranchRead, BranchListResponse,
)
from app.schemas.product import (
    ProductCreate, ProductUpdate, ProductRead, ProductListResponse,
    ProductTemplateCreate, ProductTemplateUpdate, ProductTemplateRead, ProductTemplateListResponse,
)
from app.schemas.member import (
    MemberRead, MyPermissionsRead, PermissionRead, RolesOverview, RolePermissionsUpdate,
    RolePermissionsRead, MembershipRoleUpdate, MembershipRead,
)
from app.schemas.organization import (
    OrganizationCreate, OrganizationRead, OrganizationCreated, MyOrganization, MyOrganizationList,
    InvitationCreate, InvitationCreated, InvitationRead, InvitationAccepted,
)
from app.schemas.hr import ScheduleUpsert, ScheduleRead, CalendarWeek, EmployeeCard

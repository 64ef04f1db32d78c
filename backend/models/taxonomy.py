"""
Taxonomy Registry

Static reference data for the studio chain: studios, trainers, classes,
ticket categories with their default routing, priority/status display
metadata and the department list. Loaded once at import and never mutated.

The category UUIDs match the rows of the Supabase `categories` table.
"""
from types import MappingProxyType
from typing import Dict, Optional, Tuple

from pydantic import BaseModel, ConfigDict, Field

from backend.models.schemas import Priority, TicketStatus


class Studio(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    city: str


class Category(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    code: str
    name: str
    icon: str
    default_team: str
    default_priority: Priority
    subcategories: Tuple[str, ...] = ()


class PriorityInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    color: str
    sla_hours: float
    response_hours: float


class StatusInfo(BaseModel):
    model_config = ConfigDict(frozen=True)

    label: str
    color: str


class LabeledOption(BaseModel):
    model_config = ConfigDict(frozen=True)

    value: str
    label: str
    icon: Optional[str] = None


class TaxonomySnapshot(BaseModel):
    """Whole registry, as served to the dashboard"""
    studios: Tuple[Studio, ...]
    trainers: Tuple[str, ...]
    classes: Tuple[str, ...]
    categories: Tuple[Category, ...]
    priorities: Dict[str, PriorityInfo] = Field(default_factory=dict)
    statuses: Dict[str, StatusInfo] = Field(default_factory=dict)
    client_moods: Tuple[LabeledOption, ...]
    client_statuses: Tuple[LabeledOption, ...]
    departments: Tuple[str, ...]


STUDIOS: Tuple[Studio, ...] = (
    Studio(id="kwality-house", name="Kwality House Kemps Corner", city="Mumbai"),
    Studio(id="kenkre-house", name="Kenkre House", city="Mumbai"),
    Studio(id="sufc", name="South United Football Club", city="Mumbai"),
    Studio(id="supreme-hq", name="Supreme HQ Bandra", city="Mumbai"),
    Studio(id="wework-prestige", name="WeWork Prestige Central", city="Mumbai"),
    Studio(id="wework-galaxy", name="WeWork Galaxy", city="Mumbai"),
    Studio(id="copper-cloves", name="The Studio by Copper + Cloves", city="Mumbai"),
    Studio(id="popup", name="Pop-up", city="Various"),
)

TRAINERS: Tuple[str, ...] = (
    "Anisha Shah", "Atulan Purohit", "Karanvir Bhatia", "Mrigakshi Jaiswal",
    "Reshma Sharma", "Karan Bhatia", "Pushyank Nahar", "Shruti Kulkarni",
    "Janhavi Jain", "Rohan Dahima", "Kajol Kanchan", "Vivaran Dhasmana",
    "Upasna Paranjpe", "Richard D'Costa", "Pranjali Jain", "Saniya Jaiswal",
    "Shruti Suresh", "Cauveri Vikrant", "Poojitha Bhaskar", "Nishanth Raj",
    "Siddhartha Kusuma", "Simonelle De Vitre", "Kabir Varma", "Simran Dutt",
    "Veena Narasimhan", "Anmol Sharma", "Bret Saldanha", "Raunak Khemuka",
    "Chaitanya Nahar", "Sovena Shetty",
)

CLASSES: Tuple[str, ...] = (
    "Studio Barre 57", "Studio Foundations", "Studio Barre 57 Express",
    "Studio Cardio Barre", "Studio FIT", "Studio Mat 57", "Studio SWEAT In 30",
    "Studio Amped Up!", "Studio Back Body Blaze", "Studio Cardio Barre Plus",
    "Studio Cardio Barre Express", "Studio HIIT", "Studio Back Body Blaze Express",
    "Studio Recovery", "Studio Hosted Class", "Studio Trainer's Choice",
    "Studio Pre/Post Natal", "Studio Mat 57 Express", "Studio PowerCycle Express",
    "Studio PowerCycle", "Studio Strength Lab (Pull)", "Studio Strength Lab (Full Body)",
    "Studio Strength Lab (Push)", "Studio Strength Lab",
)

CATEGORIES: Tuple[Category, ...] = (
    Category(
        id="f4b30263-d66b-4abc-8580-7ae5ad50204d",
        code="BT",
        name="Booking & Technology",
        icon="Smartphone",
        default_team="Operations",
        default_priority=Priority.MEDIUM,
        subcategories=(
            "App Issues", "Website Issues", "Class Booking", "Payment Processing",
            "Account Access", "Notifications", "Technical Support", "Booking Failures",
        ),
    ),
    Category(
        id="92c1ab90-cefb-452c-b555-7bb4e86afb8e",
        code="CS",
        name="Customer Service",
        icon="Headphones",
        default_team="Client Success",
        default_priority=Priority.HIGH,
        subcategories=(
            "Response Time", "Staff Knowledge", "Communication Quality", "Phone Support",
            "Front Desk Service", "Newcomer Experience", "Email/Chat Support",
            "Staff Availability", "Complaint Handling", "Issue Resolution", "Staff Professionalism",
        ),
    ),
    Category(
        id="bd4c7c4f-b4ea-4d39-9f34-25b4573a106a",
        code="HS",
        name="Health & Safety",
        icon="Shield",
        default_team="Facilities",
        default_priority=Priority.HIGH,
        subcategories=(
            "Medical Disclosure", "Injury During Class", "COVID/Health Protocols",
            "Air Quality", "Emergency Preparedness", "Equipment Safety", "Hygiene Protocols",
        ),
    ),
    Category(
        id="02069c93-f3db-47f3-8c59-c186fc74e70d",
        code="RM",
        name="Retail Management",
        icon="ShoppingCart",
        default_team="Sales",
        default_priority=Priority.MEDIUM,
        subcategories=(
            "Staff Knowledge", "Product Availability", "Product Quality", "Pricing",
            "Return/Exchange",
        ),
    ),
    Category(
        id="087672a0-423a-4b7c-acaa-d3683e3edd86",
        code="CC",
        name="Community & Culture",
        icon="Users",
        default_team="Operations",
        default_priority=Priority.MEDIUM,
        subcategories=(
            "Clique Behavior", "Studio Culture", "Member Behavior", "Discrimination",
            "Inclusivity Issues", "Community Events",
        ),
    ),
    Category(
        id="cc4d8875-22f5-421a-b235-fd93cefb19d7",
        code="SM",
        name="Sales & Marketing",
        icon="TrendingUp",
        default_team="Sales",
        default_priority=Priority.MEDIUM,
        subcategories=(
            "Events & Workshops", "Misleading Information", "Guest Passes/Referrals",
            "Aggressive Selling", "Social Media", "Trial Class Experience",
            "Communication Overload", "Brand Communication",
        ),
    ),
    Category(
        id="d2fab980-96b8-4147-b99f-6debae7167b0",
        code="SP",
        name="Special Programs",
        icon="Zap",
        default_team="Operations",
        default_priority=Priority.MEDIUM,
        subcategories=(
            "Workshop Quality", "Challenges & Competitions", "Special Needs Programs",
            "Corporate Programs", "Private Sessions",
        ),
    ),
    Category(
        id="dd057e85-62c0-4747-b4ad-773af6542695",
        code="MISC",
        name="Miscellaneous",
        icon="MoreHorizontal",
        default_team="Operations",
        default_priority=Priority.MEDIUM,
        subcategories=(
            "Policy Changes", "Feedback System", "Noise Disturbance", "Multi-location Issues",
            "Guest Experience", "Nutrition/Wellness Advice", "Lost & Found",
        ),
    ),
    Category(
        id="8e5767ff-7c90-4bbe-aacd-2d8f8142ed46",
        code="GLOBAL",
        name="Global",
        icon="Globe",
        default_team="Operations",
        default_priority=Priority.MEDIUM,
        subcategories=(),
    ),
)

PRIORITIES = MappingProxyType({
    Priority.CRITICAL: PriorityInfo(label="Critical", color="destructive", sla_hours=2, response_hours=0.25),
    Priority.HIGH: PriorityInfo(label="High", color="orange", sla_hours=8, response_hours=1),
    Priority.MEDIUM: PriorityInfo(label="Medium", color="yellow", sla_hours=24, response_hours=4),
    Priority.LOW: PriorityInfo(label="Low", color="green", sla_hours=72, response_hours=8),
})

STATUSES = MappingProxyType({
    TicketStatus.NEW: StatusInfo(label="New", color="blue"),
    TicketStatus.ASSIGNED: StatusInfo(label="Assigned", color="purple"),
    TicketStatus.IN_PROGRESS: StatusInfo(label="In Progress", color="yellow"),
    TicketStatus.PENDING_CUSTOMER: StatusInfo(label="Pending Customer", color="orange"),
    TicketStatus.RESOLVED: StatusInfo(label="Resolved", color="green"),
    TicketStatus.CLOSED: StatusInfo(label="Closed", color="gray"),
    TicketStatus.REOPENED: StatusInfo(label="Reopened", color="red"),
})

CLIENT_MOODS: Tuple[LabeledOption, ...] = (
    LabeledOption(value="calm", label="Calm", icon="Smile"),
    LabeledOption(value="frustrated", label="Frustrated", icon="Meh"),
    LabeledOption(value="angry", label="Angry", icon="Angry"),
    LabeledOption(value="disappointed", label="Disappointed", icon="Frown"),
    LabeledOption(value="understanding", label="Understanding", icon="ThumbsUp"),
)

CLIENT_STATUSES: Tuple[LabeledOption, ...] = (
    LabeledOption(value="existing_active", label="Existing Active"),
    LabeledOption(value="existing_inactive", label="Existing Inactive"),
    LabeledOption(value="new_prospect", label="New Prospect"),
    LabeledOption(value="trial_client", label="Trial Client"),
    LabeledOption(value="guest", label="Guest (Hosted Class)"),
)

DEPARTMENTS: Tuple[str, ...] = (
    "Operations",
    "Facilities",
    "Training",
    "Sales",
    "Client Success",
    "Marketing",
    "Finance",
    "Management",
    "IT/Tech Support",
    "HR",
    "Security",
)

_CATEGORIES_BY_NAME = {category.name: category for category in CATEGORIES}
_CATEGORIES_BY_ID = {category.id: category for category in CATEGORIES}
_STUDIOS_BY_ID = {studio.id: studio for studio in STUDIOS}
_TRAINERS_LOWER = {trainer.lower() for trainer in TRAINERS}


def get_category_by_name(name: Optional[str]) -> Optional[Category]:
    """Exact-name category lookup"""
    if not name:
        return None
    return _CATEGORIES_BY_NAME.get(name)


def get_category_by_id(category_id: Optional[str]) -> Optional[Category]:
    if not category_id:
        return None
    return _CATEGORIES_BY_ID.get(category_id)


def get_studio_by_id(studio_id: Optional[str]) -> Optional[Studio]:
    if not studio_id:
        return None
    return _STUDIOS_BY_ID.get(studio_id)


def is_known_trainer(name: Optional[str]) -> bool:
    """Case-insensitive trainer roster check"""
    if not name:
        return False
    return name.strip().lower() in _TRAINERS_LOWER


def get_taxonomy() -> TaxonomySnapshot:
    """Return the full registry"""
    return TaxonomySnapshot(
        studios=STUDIOS,
        trainers=TRAINERS,
        classes=CLASSES,
        categories=CATEGORIES,
        priorities={priority.value: info for priority, info in PRIORITIES.items()},
        statuses={status.value: info for status, info in STATUSES.items()},
        client_moods=CLIENT_MOODS,
        client_statuses=CLIENT_STATUSES,
        departments=DEPARTMENTS,
    )

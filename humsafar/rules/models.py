from pydantic import BaseModel, Field, model_validator


class ProjectRules(BaseModel):
    slug: str
    rules_version: str

class VisibilityRules(BaseModel):
    featured_limit: int = Field(default=5, ge=1)
    placeholder_image: str = "/placeholder.jpg"
    tracked_fields: list[str]
    field_weight: int = 80
    photo_weight: int = 20

    @model_validator(mode="after")
    def weights_sum_to_100(self) -> "VisibilityRules":
        if self.field_weight + self.photo_weight != 100:
            raise ValueError("field_weight + photo_weight must equal 100")
        if not self.tracked_fields:
            raise ValueError("tracked_fields must not be empty")
        return self

class QuotaRules(BaseModel):
    blocking_payment_statuses: list[str]
    status_annotations: dict[str, str]
    no_subscription_label: str = "Package Purchase"

class PackageDefinition(BaseModel):
    label: str
    price: float
    views: int = Field(ge=0)

class AmountTier(BaseModel):
    amounts: list[float]
    package: str

class CustomTierRules(BaseModel):
    above_amount: float
    base_views: int
    amount_per_extra_view: float
    package: str = "custom"

class PackagesRules(BaseModel):
    catalog: dict[str, PackageDefinition]
    amount_tiers: list[AmountTier]
    custom_tier: CustomTierRules
    fallback_package: str = "basic"
    addon_package_type: str = "add_on"

class AddonDefinition(BaseModel):
    label: str
    price: float
    sets_flag: bool = False
    duration_days: int | None = None

class AddonsRules(BaseModel):
    catalog: dict[str, AddonDefinition]

class OpsRules(BaseModel):
    required_env: list[str] = Field(default_factory=list)

class Rules(BaseModel):
    project: ProjectRules
    visibility: VisibilityRules
    quota: QuotaRules
    packages: PackagesRules
    addons: AddonsRules
    ops: OpsRules

"""
Business Settings

The settings_app table is a key/value store with JSON values. Every key has
exactly one typed schema variant (discriminated by `key`), so a typo in a key
or a value of the wrong type fails when the settings are loaded or updated,
not later at the point of use.
"""
from typing import Annotated, Dict, List, Literal, Union
import enum

from pydantic import BaseModel, Field, SecretStr, StrictBool, StrictStr, TypeAdapter, ValidationError, field_validator
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession
import structlog

from dolu.models.messaging import AppSetting
from dolu.services.errors import InvalidSettingError

logger = structlog.get_logger()


class SmsSendMode(str, enum.Enum):
    """manual_only: staff press "send"; auto_on_in_progress: logged when a parcel goes in progress."""
    MANUAL_ONLY = "manual_only"
    AUTO_ON_IN_PROGRESS = "auto_on_in_progress"


class _SettingEntry(BaseModel):
    class Config:
        extra = "forbid"


class CustomerCarePhoneSetting(_SettingEntry):
    key: Literal["customer_care_phone"]
    value: StrictStr


class CustomerCareWhatsappSetting(_SettingEntry):
    key: Literal["customer_care_whatsapp"]
    value: StrictStr


class BusinessHoursSetting(_SettingEntry):
    key: Literal["business_hours_text"]
    value: StrictStr


class AdminEmailsSetting(_SettingEntry):
    key: Literal["admin_emails"]
    value: List[StrictStr]

    @field_validator("value")
    @classmethod
    def check_addresses(cls, value):
        for address in value:
            if "@" not in address or address.startswith("@") or address.endswith("@"):
                raise ValueError(f"Not an email address: {address!r}")
        return value


class EmailOnNewBookingSetting(_SettingEntry):
    key: Literal["email_on_new_booking"]
    value: StrictBool


class EmailOnNewContactMessageSetting(_SettingEntry):
    key: Literal["email_on_new_contact_message"]
    value: StrictBool


class SmsEnabledSetting(_SettingEntry):
    key: Literal["sms_enabled"]
    value: StrictBool


class SmsSendModeSetting(_SettingEntry):
    key: Literal["sms_send_mode"]
    value: SmsSendMode


class SmsProviderSetting(_SettingEntry):
    key: Literal["sms_provider"]
    value: StrictStr


class SmsApiKeySetting(_SettingEntry):
    key: Literal["sms_api_key"]
    value: StrictStr


class SmsSenderNameSetting(_SettingEntry):
    key: Literal["sms_sender_name"]
    value: StrictStr = Field(max_length=11)  # alphanumeric sender ids are capped at 11 chars


SettingEntry = Annotated[
    Union[
        CustomerCarePhoneSetting,
        CustomerCareWhatsappSetting,
        BusinessHoursSetting,
        AdminEmailsSetting,
        EmailOnNewBookingSetting,
        EmailOnNewContactMessageSetting,
        SmsEnabledSetting,
        SmsSendModeSetting,
        SmsProviderSetting,
        SmsApiKeySetting,
        SmsSenderNameSetting,
    ],
    Field(discriminator="key"),
]

setting_entry_adapter = TypeAdapter(SettingEntry)

SETTING_DESCRIPTIONS: Dict[str, str] = {
    "customer_care_phone": "Primary customer care phone number",
    "customer_care_whatsapp": "WhatsApp number for customer support",
    "business_hours_text": "Business operating hours",
    "admin_emails": "List of admin email addresses",
    "email_on_new_booking": "Send email to admins when new booking created",
    "email_on_new_contact_message": "Send email to admins when new contact message received",
    "sms_enabled": "Master toggle for SMS functionality",
    "sms_send_mode": "SMS send mode: manual_only or auto_on_in_progress",
    "sms_provider": "SMS provider (termii, twilio, etc.)",
    "sms_api_key": "SMS provider API key (keep secure)",
    "sms_sender_name": "Sender name shown in SMS",
}


class AppConfig(BaseModel):
    """Typed view of all business settings; missing keys take these defaults."""

    customer_care_phone: str = ""
    customer_care_whatsapp: str = ""
    business_hours_text: str = ""
    admin_emails: List[str] = []
    email_on_new_booking: bool = False
    email_on_new_contact_message: bool = False
    sms_enabled: bool = False
    sms_send_mode: SmsSendMode = SmsSendMode.MANUAL_ONLY
    sms_provider: str = ""
    sms_api_key: SecretStr = SecretStr("")
    sms_sender_name: str = ""

    class Config:
        extra = "forbid"
        frozen = True

    @property
    def auto_sms_on_in_progress(self) -> bool:
        return self.sms_enabled and self.sms_send_mode == SmsSendMode.AUTO_ON_IN_PROGRESS

    def public_view(self) -> Dict[str, str]:
        """Customer-facing contact details only."""
        return {
            "customer_care_phone": self.customer_care_phone,
            "customer_care_whatsapp": self.customer_care_whatsapp,
            "business_hours_text": self.business_hours_text,
        }


def parse_setting(key: str, value) -> Union[_SettingEntry, BaseModel]:
    """Validate one key/value pair against its schema variant."""
    try:
        return setting_entry_adapter.validate_python({"key": key, "value": value})
    except ValidationError as exc:
        raise InvalidSettingError(f"Invalid setting {key!r}: {exc.errors()[0]['msg']}") from exc


async def load_app_config(db: AsyncSession) -> AppConfig:
    """Load and validate every stored setting into an AppConfig."""
    result = await db.execute(select(AppSetting))
    values = {}
    for row in result.scalars().all():
        entry = parse_setting(row.key, row.value)
        values[entry.key] = entry.value
    return AppConfig(**values)


async def update_setting(db: AsyncSession, entry) -> AppSetting:
    """Upsert one validated setting entry."""
    value = entry.value.value if isinstance(entry.value, enum.Enum) else entry.value

    row = await db.get(AppSetting, entry.key)
    if row is None:
        row = AppSetting(key=entry.key, description=SETTING_DESCRIPTIONS.get(entry.key))
        db.add(row)
    row.value = value
    await db.commit()

    logger.info(
        "Setting updated",
        key=entry.key,
        value="***" if entry.key == "sms_api_key" else value,
    )
    return row

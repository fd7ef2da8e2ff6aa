""" Typed fragments of workflow and form configuration documents. """
import re
from typing import Annotated, Any, List, Literal, Optional, Tuple, Type, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter, ValidationError, field_validator

M = TypeVar("M", bound=BaseModel)


class TextValidation(BaseModel):
    min_length: Optional[int] = None
    max_length: Optional[int] = None
    pattern: Optional[str] = None

    @field_validator("pattern")
    @classmethod
    def _compilable(cls, value):
        if value is not None:
            try:
                re.compile(value)
            except re.error as e:
                raise ValueError(f"invalid pattern: {e}")
        return value


class NumberValidation(BaseModel):
    min: Optional[Union[int, float]] = None
    max: Optional[Union[int, float]] = None


class _FieldBase(BaseModel):
    # UI hints (placeholder, help_text, width, ...) pass through untouched
    model_config = ConfigDict(extra="allow", frozen=True)

    name: str
    label: Optional[str] = None
    required: bool = False

    @property
    def display_label(self) -> str:
        return self.label or self.name


class TextField(_FieldBase):
    type: Literal["text"]
    validation: TextValidation = Field(default_factory=TextValidation)


class TextareaField(_FieldBase):
    type: Literal["textarea"]
    validation: TextValidation = Field(default_factory=TextValidation)


class NumberField(_FieldBase):
    type: Literal["number"]
    validation: NumberValidation = Field(default_factory=NumberValidation)


class SelectField(_FieldBase):
    type: Literal["select"]
    # a literal list, or the name of a registered option provider ("countries")
    options: Optional[Union[List[Any], str]] = None


class ArrayField(_FieldBase):
    type: Literal["array"]
    min_items: Optional[int] = None
    max_items: Optional[int] = None
    item_schema: Optional[List["FieldSpec"]] = None


FieldSpec = Annotated[
    Union[TextField, TextareaField, NumberField, SelectField, ArrayField],
    Field(discriminator="type"),
]

ArrayField.model_rebuild()

_FIELD_LIST = TypeAdapter(List[FieldSpec])


class DocumentRequirement(BaseModel):
    model_config = ConfigDict(extra="allow", frozen=True)

    type: str
    title: Optional[str] = None
    description: Optional[str] = None
    required: bool = False
    max_size_mb: Optional[Union[int, float]] = None
    accepted_formats: Optional[List[str]] = None
    multiple: bool = False

    @field_validator("accepted_formats")
    @classmethod
    def _upper_formats(cls, value):
        if value is None:
            return value
        return [str(fmt).upper() for fmt in value]

    @property
    def display_title(self) -> str:
        return self.title or self.type


class PaymentItem(BaseModel):
    model_config = ConfigDict(extra="allow", frozen=True)

    name: str
    amount: Optional[Union[int, float]] = None
    currency: str = "AED"
    required: bool = True

    @property
    def payment_key(self) -> str:
        return self.name.lower().replace(" ", "_")


class FreezoneInfo(BaseModel):
    model_config = ConfigDict(extra="allow", frozen=True)

    code: Optional[str] = None
    name: Optional[str] = None
    tagline: Optional[str] = None


class FormStep(BaseModel):
    model_config = ConfigDict(extra="allow", frozen=True)

    id: str
    title: str
    component: str
    subtitle: Optional[str] = None
    icon: Optional[str] = None


class ActivityRules(BaseModel):
    model_config = ConfigDict(extra="allow", frozen=True)

    free_activities_count: int = 3
    max_activities_count: int = 10


class ShareCapitalRules(BaseModel):
    model_config = ConfigDict(extra="allow", frozen=True)

    min_amount: Union[int, float] = 1000
    max_without_bank_letter: Union[int, float] = 150000
    partner_visa_capital_multiplier: Union[int, float] = 48000


class VisaRules(BaseModel):
    model_config = ConfigDict(extra="allow", frozen=True)

    min_package: int = 1
    max_package: int = 9
    establishment_card_required_when_visas: bool = False


class BusinessRules(BaseModel):
    model_config = ConfigDict(extra="allow", frozen=True)

    activities: ActivityRules = Field(default_factory=ActivityRules)
    share_capital: ShareCapitalRules = Field(default_factory=ShareCapitalRules)
    visas: VisaRules = Field(default_factory=VisaRules)


class BannedWords(BaseModel):
    model_config = ConfigDict(extra="allow", frozen=True)

    tokens: List[str] = Field(default_factory=list)
    case_sensitive: bool = True


class NameRestrictions(BaseModel):
    model_config = ConfigDict(extra="allow", frozen=True)

    single_word_min_length: int = 2


class FileUploadRules(BaseModel):
    model_config = ConfigDict(extra="allow", frozen=True)

    max_size_mb: Optional[Union[int, float]] = None
    accepted_formats: Optional[List[str]] = None


class ValidationRules(BaseModel):
    model_config = ConfigDict(extra="allow", frozen=True)

    banned_words: BannedWords = Field(default_factory=BannedWords)
    name_restrictions: NameRestrictions = Field(default_factory=NameRestrictions)
    file_upload: FileUploadRules = Field(default_factory=FileUploadRules)


def _error_messages(exc: ValidationError, where: str) -> List[str]:
    messages = []
    for err in exc.errors():
        loc = ".".join(str(part) for part in err.get("loc", ()))
        prefix = f"{where}.{loc}" if loc else where
        messages.append(f"{prefix}: {err.get('msg')}")
    return messages


def parse_model(model_cls: Type[M], raw: Any, where: str) -> Tuple[Optional[M], List[str]]:
    """Validate ``raw`` against ``model_cls``.

    Returns the model (or None) and the list of problems found, so callers can
    keep accumulating errors instead of stopping at the first one.
    """
    if raw is None:
        raw = {}
    try:
        return model_cls.model_validate(raw), []
    except ValidationError as e:
        return None, _error_messages(e, where)


def parse_fields(raw: Any, where: str) -> Tuple[Tuple[Any, ...], List[str]]:
    """ Validate a list of field definitions (FORM steps and array item schemas). """
    if raw is None:
        return (), []
    try:
        return tuple(_FIELD_LIST.validate_python(raw)), []
    except ValidationError as e:
        return (), _error_messages(e, where)


def parse_list(model_cls: Type[M], raw: Any, where: str) -> Tuple[Tuple[M, ...], List[str]]:
    """ Validate every entry of a list, reporting bad entries by position. """
    if raw is None:
        return (), []
    if not isinstance(raw, list):
        return (), [f"{where}: must be a list"]
    items: List[M] = []
    errors: List[str] = []
    for index, entry in enumerate(raw):
        item, item_errors = parse_model(model_cls, entry, f"{where}[{index}]")
        errors.extend(item_errors)
        if item is not None:
            items.append(item)
    return tuple(items), errors

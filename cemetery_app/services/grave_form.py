"""
Working copy of a burial record while it is being created or edited
"""

import base64
import binascii
from collections.abc import Mapping

from cemetery_app.services.exceptions import ExtractionError, ExternalServiceError, ValidationError
from cemetery_app.shared.grave_calculations import compute_age
from cemetery_app.shared.logging_config import get_project_logger
from cemetery_app.shared.models import Gender, GraveRecord


logger = get_project_logger(__name__)

TEXT_FIELDS = [
    'deceased_full_name',
    'parent_names',
    'husband_name',
    'relative_contact',
    'date_of_birth',
    'date_of_death',
    'grave_number',
    'image_url',
    'notes',
]

REQUIRED_FIELDS = {
    'deceased_full_name': 'Full name',
    'date_of_death': 'Date of death',
    'grave_number': 'Grave number',
}

# working copy field -> key in the extraction result; overwritten only when non-empty
EXTRACTED_TEXT_FIELDS = {
    'deceased_full_name': 'deceasedFullName',
    'parent_names': 'parentNames',
    'husband_name': 'husbandName',
    'date_of_birth': 'dateOfBirth',
    'date_of_death': 'dateOfDeath',
    'grave_number': 'graveNumber',
}

AUTO_NOTES_PREFIX = "Auto-extracted: "


def parse_age(value, default: int = 0) -> int:
    """Integer age from user or model input; default when it is not a number"""
    if isinstance(value, bool):
        return default
    try:
        return int(str(value).strip())
    except (TypeError, ValueError):
        try:
            return int(float(value))
        except (TypeError, ValueError):
            return default


def merge_extraction(base: dict, age_at_death: int, extracted: Mapping) -> tuple[dict, int]:
    """
    Overlay an extraction result onto a working copy

    Text fields from the extraction win only when non-empty, notes are
    appended, gender is mapped from "Female"/"Male" (anything else keeps the
    current value) and a present age replaces the tracked age.

    Returns:
        (merged fields, age)
    """
    merged = dict(base)

    for field_name, key in EXTRACTED_TEXT_FIELDS.items():
        value = extracted.get(key)
        if value not in (None, ''):
            merged[field_name] = str(value).strip() or merged.get(field_name, '')

    new_notes = extracted.get('notes')
    if new_notes:
        merged['notes'] = f"{merged.get('notes', '')}\n\n{AUTO_NOTES_PREFIX}{new_notes}".strip()

    gender = extracted.get('gender')
    if gender == Gender.FEMALE.value:
        merged['gender'] = Gender.FEMALE
    elif gender == Gender.MALE.value:
        merged['gender'] = Gender.MALE

    extracted_age = extracted.get('ageAtDeath')
    if extracted_age is not None:
        age_at_death = parse_age(extracted_age, default=age_at_death)

    return merged, age_at_death


class GraveForm:
    """Form controller for one record: seeding, AI helpers, validation and save"""

    def __init__(self, fields: dict = None, age_at_death: int = 0, record_id: str = None):
        self.fields = {name: '' for name in TEXT_FIELDS}
        self.fields['gender'] = Gender.MALE
        if fields:
            self.fields.update(fields)
        self.age_at_death = age_at_death
        self.record_id = record_id

    @classmethod
    def for_new(cls, suggested_grave_number: str = '') -> 'GraveForm':
        return cls({'grave_number': suggested_grave_number or ''})

    @classmethod
    def for_record(cls, record: GraveRecord) -> 'GraveForm':
        fields = record.editable_fields()
        age = fields.pop('age_at_death')
        return cls(fields, age_at_death=age, record_id=record.id)

    @classmethod
    def from_submission(cls, form_data: Mapping, record_id: str = None) -> 'GraveForm':
        """
        Rebuild the working copy from a posted form

        The page echoes the dates it was rendered with in previous_date_of_birth
        and previous_date_of_death; if either date changed the age is
        recomputed, otherwise the posted age (possibly a manual edit) is kept.
        """
        fields = {name: (form_data.get(name) or '').strip() for name in TEXT_FIELDS}
        fields['gender'] = Gender.parse(form_data.get('gender'))

        form = cls(fields, age_at_death=parse_age(form_data.get('age_at_death')), record_id=record_id or None)

        previous_birth = form_data.get('previous_date_of_birth', '')
        previous_death = form_data.get('previous_date_of_death', '')
        if (fields['date_of_birth'], fields['date_of_death']) != (previous_birth, previous_death):
            form.set_dates(fields['date_of_birth'], fields['date_of_death'])
        return form

    @property
    def is_editing(self) -> bool:
        return self.record_id is not None

    @property
    def gender(self) -> Gender:
        return self.fields['gender']

    def set_dates(self, birth: str, death: str) -> None:
        """Change the dates; age follows when both are present and valid"""
        self.fields['date_of_birth'] = birth or ''
        self.fields['date_of_death'] = death or ''
        if birth and death:
            self.age_at_death = compute_age(birth, death, self.age_at_death)

    def attach_image(self, file_bytes: bytes, mime_type: str = None) -> None:
        """Embed an image file in the record as a base64 data URI"""
        mime_type = mime_type or 'application/octet-stream'
        encoded = base64.b64encode(file_bytes).decode('ascii')
        self.fields['image_url'] = f"data:{mime_type};base64,{encoded}"

    def clear_image(self) -> None:
        self.fields['image_url'] = ''

    def decode_image(self) -> tuple[bytes, str]:
        """
        Raw bytes and media type of the attached data URI

        image_url round-trips through the browser, so anything other than an
        embedded data URI is refused rather than fetched.
        """
        image_url = self.fields.get('image_url') or ''
        if not image_url:
            raise ValidationError("Please upload a photo first.")
        if not image_url.startswith('data:'):
            logger.warning(f"Refusing to read non-embedded image {image_url[:80]!r}")
            raise ValidationError("Please upload the photo again.")

        header, _, payload = image_url.partition(',')
        mime_type = header[len('data:'):].split(';')[0] or 'application/octet-stream'
        try:
            return base64.b64decode(payload, validate=True), mime_type
        except (binascii.Error, ValueError) as e:
            raise ValidationError("The attached photo could not be read.") from e

    def scan_image(self, ai_service) -> dict:
        """
        Read the attached headstone photo and merge what was found

        Raises:
            ValidationError: no photo attached
            ExtractionError: nothing could be read from the photo
        """
        image_bytes, mime_type = self.decode_image()
        extracted = ai_service.extract_from_image(image_bytes, mime_type)
        if not extracted:
            raise ExtractionError("No information could be read. The photo may not be clear enough.")

        previous_dates = (self.fields['date_of_birth'], self.fields['date_of_death'])
        self.fields, self.age_at_death = merge_extraction(self.fields, self.age_at_death, extracted)
        # Changed dates win over the model's age whenever both are valid
        merged_dates = (self.fields['date_of_birth'], self.fields['date_of_death'])
        if merged_dates != previous_dates:
            self.set_dates(*merged_dates)
        logger.info(f"Merged {len(extracted)} extracted fields into the working copy")
        return extracted

    def suggest_notes(self, ai_service) -> str:
        """Replace the notes with generated memorial text"""
        name = self.fields.get('deceased_full_name', '').strip()
        if not name:
            raise ValidationError("Please enter the name first.")

        suggestion = ai_service.suggest_notes(name)
        if not suggestion:
            raise ExternalServiceError("Notes could not be generated right now.")
        self.fields['notes'] = suggestion
        return suggestion

    def validate(self) -> None:
        missing = [label for name, label in REQUIRED_FIELDS.items() if not str(self.fields.get(name, '')).strip()]
        if missing:
            raise ValidationError(f"Required fields missing: {', '.join(missing)}")

    def to_record_fields(self) -> dict:
        """Fields to store; husband name is only kept for female records"""
        self.validate()
        record_fields = dict(self.fields)
        if record_fields['gender'] is not Gender.FEMALE:
            record_fields['husband_name'] = ''
        record_fields['age_at_death'] = self.age_at_death
        return record_fields

    def submit(self, store) -> GraveRecord:
        """Create or update the record in the store"""
        record_fields = self.to_record_fields()
        if self.is_editing:
            record = store.update(self.record_id, record_fields)
            logger.info(f"Updated grave record {self.record_id}")
        else:
            record = store.create(record_fields)
            logger.info(f"Created grave record {record.id}")
        return record

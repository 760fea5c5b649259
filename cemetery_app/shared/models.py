"""
Shared data models for burial records
"""

from dataclasses import dataclass, fields
from enum import Enum


class Gender(Enum):
    """Gender of the deceased, serialized with its display value"""
    MALE = 'Male'
    FEMALE = 'Female'
    OTHER = 'Other'

    @classmethod
    def parse(cls, value, default: 'Gender' = None) -> 'Gender':
        """Parse a serialized gender, falling back to default (MALE if not given)"""
        if isinstance(value, cls):
            return value
        for member in cls:
            if value in (member.value, member.name):
                return member
        return default if default is not None else cls.MALE


# snake_case attribute -> camelCase key used in persisted JSON and the API
FIELD_KEYS = {
    'id': 'id',
    'deceased_full_name': 'deceasedFullName',
    'parent_names': 'parentNames',
    'husband_name': 'husbandName',
    'relative_contact': 'relativeContact',
    'date_of_birth': 'dateOfBirth',
    'date_of_death': 'dateOfDeath',
    'age_at_death': 'ageAtDeath',
    'gender': 'gender',
    'grave_number': 'graveNumber',
    'image_url': 'imageUrl',
    'notes': 'notes',
    'created_at': 'createdAt',
}

# Fields a user may edit; id and created_at are owned by the store
EDITABLE_FIELDS = [
    'deceased_full_name',
    'parent_names',
    'husband_name',
    'relative_contact',
    'date_of_birth',
    'date_of_death',
    'age_at_death',
    'gender',
    'grave_number',
    'image_url',
    'notes',
]


@dataclass
class GraveRecord:
    """A single burial record"""
    id: str
    deceased_full_name: str
    date_of_death: str
    grave_number: str
    created_at: str
    parent_names: str = ""
    husband_name: str = ""
    relative_contact: str = ""
    date_of_birth: str = ""
    age_at_death: int = 0
    gender: Gender = Gender.MALE
    image_url: str = ""
    notes: str = ""

    @property
    def is_female(self) -> bool:
        return self.gender is Gender.FEMALE

    def editable_fields(self) -> dict:
        """Copy of every field except id and created_at"""
        return {name: getattr(self, name) for name in EDITABLE_FIELDS}

    def to_dict(self) -> dict:
        """Serialize using the persisted camelCase keys"""
        data = {}
        for f in fields(self):
            value = getattr(self, f.name)
            if isinstance(value, Gender):
                value = value.value
            data[FIELD_KEYS[f.name]] = value
        return data

    @classmethod
    def from_dict(cls, data: dict) -> 'GraveRecord':
        """Build a record from its camelCase form, tolerating missing optional keys"""
        values = {}
        for name, key in FIELD_KEYS.items():
            value = data.get(key)
            if name == 'gender':
                value = Gender.parse(value)
            elif name == 'age_at_death':
                try:
                    value = int(value or 0)
                except (TypeError, ValueError):
                    value = 0
            elif value is None:
                value = ""
            values[name] = value
        return cls(**values)


def fields_to_document(record_fields: dict) -> dict:
    """Convert editable snake_case fields to their camelCase document form"""
    document = {}
    for name in EDITABLE_FIELDS:
        if name not in record_fields:
            continue
        value = record_fields[name]
        if isinstance(value, Gender):
            value = value.value
        document[FIELD_KEYS[name]] = value
    return document

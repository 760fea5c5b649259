"""
Tests for the grave form working copy
"""

import base64
from unittest.mock import Mock

import pytest
from werkzeug.datastructures import MultiDict

from cemetery_app.services.exceptions import ExtractionError, ExternalServiceError, ValidationError
from cemetery_app.services.grave_form import GraveForm, merge_extraction, parse_age
from cemetery_app.shared.models import Gender


def submission(**overrides):
    data = {
        'deceased_full_name': 'Mary Ann Jones',
        'parent_names': 'Tom Jones',
        'husband_name': 'Peter Jones',
        'relative_contact': '+44 1234',
        'date_of_birth': '1940-03-10',
        'date_of_death': '2020-03-09',
        'previous_date_of_birth': '1940-03-10',
        'previous_date_of_death': '2020-03-09',
        'age_at_death': '79',
        'gender': 'Female',
        'grave_number': '12',
        'image_url': '',
        'notes': 'Beloved mother',
    }
    data.update(overrides)
    return MultiDict(data)


class TestMergeExtraction:
    """Test overlaying extraction results onto the working copy"""

    @pytest.fixture
    def base(self):
        return {
            'deceased_full_name': 'Existing Name',
            'parent_names': 'Existing Parents',
            'husband_name': '',
            'date_of_birth': '',
            'date_of_death': '2001-01-01',
            'grave_number': '55',
            'notes': 'Original notes',
            'gender': Gender.MALE,
        }

    def test_non_empty_fields_win(self, base):
        merged, age = merge_extraction(base, 10, {
            'deceasedFullName': 'Read Name',
            'dateOfBirth': '1930-01-01',
        })

        assert merged['deceased_full_name'] == 'Read Name'
        assert merged['date_of_birth'] == '1930-01-01'
        assert merged['parent_names'] == 'Existing Parents'
        assert merged['date_of_death'] == '2001-01-01'
        assert age == 10

    def test_empty_or_missing_fields_keep_existing(self, base):
        merged, _ = merge_extraction(base, 10, {'deceasedFullName': '', 'parentNames': None})

        assert merged['deceased_full_name'] == 'Existing Name'
        assert merged['parent_names'] == 'Existing Parents'

    def test_notes_are_appended(self, base):
        merged, _ = merge_extraction(base, 0, {'notes': 'Inscription text'})
        assert merged['notes'] == 'Original notes\n\nAuto-extracted: Inscription text'

    def test_notes_appended_to_empty_notes_are_trimmed(self, base):
        base['notes'] = ''
        merged, _ = merge_extraction(base, 0, {'notes': 'Inscription'})
        assert merged['notes'] == 'Auto-extracted: Inscription'

    @pytest.mark.parametrize("extracted_gender,expected", [
        ('Female', Gender.FEMALE),
        ('Male', Gender.MALE),
        ('Other', Gender.MALE),
        ('unknown', Gender.MALE),
    ])
    def test_gender_mapping(self, base, extracted_gender, expected):
        merged, _ = merge_extraction(base, 0, {'gender': extracted_gender})
        assert merged['gender'] is expected

    def test_age_adopted_when_present(self, base):
        _, age = merge_extraction(base, 10, {'ageAtDeath': 71})
        assert age == 71
        _, age = merge_extraction(base, 10, {'ageAtDeath': '64'})
        assert age == 64
        _, age = merge_extraction(base, 10, {'ageAtDeath': 'unknown'})
        assert age == 10

    def test_base_is_not_mutated(self, base):
        merge_extraction(base, 0, {'deceasedFullName': 'Other'})
        assert base['deceased_full_name'] == 'Existing Name'


class TestFormSeeding:
    """Test building the working copy"""

    def test_for_new_uses_defaults_and_suggestion(self):
        form = GraveForm.for_new('104')

        assert form.fields['grave_number'] == '104'
        assert form.gender is Gender.MALE
        assert form.age_at_death == 0
        assert not form.is_editing

    def test_for_record_copies_record(self, make_record):
        record = make_record(age_at_death=55, notes='n')
        form = GraveForm.for_record(record)

        assert form.record_id == record.id
        assert form.is_editing
        assert form.age_at_death == 55
        assert form.fields['notes'] == 'n'
        assert 'age_at_death' not in form.fields

    def test_unchanged_dates_keep_manual_age(self):
        form = GraveForm.from_submission(submission(age_at_death='90'))
        assert form.age_at_death == 90

    def test_changed_dates_recompute_age(self):
        form = GraveForm.from_submission(submission(
            date_of_death='2020-03-10', age_at_death='5'))
        assert form.age_at_death == 80

    def test_new_form_with_both_dates_computes_age(self):
        form = GraveForm.from_submission(submission(
            previous_date_of_birth='', previous_date_of_death='', age_at_death='0'))
        assert form.age_at_death == 79

    def test_single_date_change_keeps_age(self):
        form = GraveForm.from_submission(submission(
            date_of_birth='', previous_date_of_birth='', previous_date_of_death='', age_at_death='33'))
        assert form.age_at_death == 33

    def test_invalid_age_becomes_zero(self):
        form = GraveForm.from_submission(submission(age_at_death='abc'))
        assert form.age_at_death == 0

    def test_parse_age(self):
        assert parse_age('12') == 12
        assert parse_age('12.7') == 12
        assert parse_age(None) == 0
        assert parse_age(True, default=3) == 3


class TestImages:
    """Test attaching and decoding images"""

    def test_attach_image_creates_data_uri(self):
        form = GraveForm.for_new()
        form.attach_image(b'\x89PNG', 'image/png')

        assert form.fields['image_url'] == 'data:image/png;base64,' + base64.b64encode(b'\x89PNG').decode()
        assert form.decode_image() == (b'\x89PNG', 'image/png')

    def test_decode_without_image_fails(self):
        with pytest.raises(ValidationError):
            GraveForm.for_new().decode_image()

    @pytest.mark.parametrize("image_url", [
        'http://169.254.169.254/latest/meta-data/',
        'https://example.com/stone.jpg',
        'file:///etc/passwd',
    ])
    def test_non_data_uri_is_never_fetched(self, requests_mock, image_url):
        form = GraveForm({'image_url': image_url})

        with pytest.raises(ValidationError):
            form.decode_image()
        assert not requests_mock.called

    def test_invalid_base64_rejected(self):
        form = GraveForm({'image_url': 'data:image/png;base64,@@not base64@@'})
        with pytest.raises(ValidationError):
            form.decode_image()

    def test_clear_image(self):
        form = GraveForm.for_new()
        form.attach_image(b'abc', 'image/jpeg')
        form.clear_image()
        assert form.fields['image_url'] == ''


class TestAIActions:
    """Test scan and note suggestion"""

    def test_scan_merges_result(self, mock_ai_service):
        mock_ai_service.extract_from_image.return_value = {
            'deceasedFullName': 'Read From Stone',
            'gender': 'Female',
            'ageAtDeath': 80,
            'notes': 'Forever loved',
        }
        form = GraveForm.for_new('7')
        form.attach_image(b'img', 'image/jpeg')

        form.scan_image(mock_ai_service)

        mock_ai_service.extract_from_image.assert_called_once_with(b'img', 'image/jpeg')
        assert form.fields['deceased_full_name'] == 'Read From Stone'
        assert form.gender is Gender.FEMALE
        assert form.age_at_death == 80
        assert form.fields['notes'] == 'Auto-extracted: Forever loved'
        assert form.fields['grave_number'] == '7'

    def test_scan_recomputes_age_from_new_dates(self, mock_ai_service):
        mock_ai_service.extract_from_image.return_value = {
            'dateOfBirth': '1990-06-01',
            'dateOfDeath': '2020-03-01',
            'ageAtDeath': 30,
        }
        form = GraveForm.for_new('7')
        form.attach_image(b'img', 'image/jpeg')

        form.scan_image(mock_ai_service)

        assert form.age_at_death == 29

    def test_scan_keeps_extracted_age_when_dates_incomplete(self, mock_ai_service):
        mock_ai_service.extract_from_image.return_value = {
            'dateOfDeath': '2020-03-01',
            'ageAtDeath': 30,
        }
        form = GraveForm.for_new('7')
        form.attach_image(b'img', 'image/jpeg')

        form.scan_image(mock_ai_service)

        assert form.age_at_death == 30

    def test_scan_keeps_extracted_age_when_dates_unchanged(self, mock_ai_service):
        mock_ai_service.extract_from_image.return_value = {'ageAtDeath': 30}
        form = GraveForm({'date_of_birth': '1990-06-01', 'date_of_death': '2020-03-01'}, age_at_death=29)
        form.attach_image(b'img', 'image/jpeg')

        form.scan_image(mock_ai_service)

        assert form.age_at_death == 30

    def test_scan_without_image_fails(self, mock_ai_service):
        with pytest.raises(ValidationError):
            GraveForm.for_new().scan_image(mock_ai_service)
        mock_ai_service.extract_from_image.assert_not_called()

    def test_scan_with_no_result_leaves_form_untouched(self, mock_ai_service):
        form = GraveForm.for_new('7')
        form.attach_image(b'img', 'image/jpeg')
        before = dict(form.fields)

        with pytest.raises(ExtractionError):
            form.scan_image(mock_ai_service)
        assert form.fields == before

    def test_suggest_notes_replaces_notes(self, mock_ai_service):
        form = GraveForm({'deceased_full_name': 'John', 'notes': 'old'})
        form.suggest_notes(mock_ai_service)

        assert form.fields['notes'] == 'Rest in peace.'
        mock_ai_service.suggest_notes.assert_called_once_with('John')

    def test_suggest_notes_requires_name(self, mock_ai_service):
        with pytest.raises(ValidationError):
            GraveForm.for_new().suggest_notes(mock_ai_service)

    def test_suggest_notes_failure_keeps_notes(self, mock_ai_service):
        mock_ai_service.suggest_notes.return_value = None
        form = GraveForm({'deceased_full_name': 'John', 'notes': 'old'})

        with pytest.raises(ExternalServiceError):
            form.suggest_notes(mock_ai_service)
        assert form.fields['notes'] == 'old'


class TestSubmit:
    """Test validation and saving"""

    def test_missing_required_fields(self):
        form = GraveForm.for_new('1')
        with pytest.raises(ValidationError, match='Full name'):
            form.validate()

    def test_husband_name_cleared_unless_female(self):
        form = GraveForm.from_submission(submission(gender='Other'))
        fields = form.to_record_fields()

        assert fields['husband_name'] == ''
        assert fields['gender'] is Gender.OTHER

    def test_husband_name_kept_for_female(self):
        fields = GraveForm.from_submission(submission()).to_record_fields()
        assert fields['husband_name'] == 'Peter Jones'
        assert fields['age_at_death'] == 79

    def test_submit_creates_when_new(self):
        store = Mock()
        form = GraveForm.from_submission(submission())

        form.submit(store)

        store.create.assert_called_once()
        store.update.assert_not_called()

    def test_submit_updates_when_editing(self):
        store = Mock()
        form = GraveForm.from_submission(submission(), record_id='abc')

        form.submit(store)

        record_id, fields = store.update.call_args[0]
        assert record_id == 'abc'
        assert fields['deceased_full_name'] == 'Mary Ann Jones'
        store.create.assert_not_called()

import pytest

from listings.models import ITEM_MODELS, LeisureActivity, Property, Service, resolve_item


def test_item_models_cover_every_type():
    assert {model.item_type for model in ITEM_MODELS.values()} == {"property", "service", "leisure"}


@pytest.mark.django_db
def test_resolve_item_by_type_and_id(cottage, chef_service, kayak_tour):
    assert resolve_item("property", cottage.pk) == cottage
    assert resolve_item("service", chef_service.pk) == chef_service
    assert isinstance(resolve_item("leisure", kayak_tour.pk), LeisureActivity)


@pytest.mark.django_db
def test_resolve_item_misses(cottage):
    assert resolve_item("service", cottage.pk + 50) is None
    assert resolve_item("vehicle", cottage.pk) is None


@pytest.mark.django_db
def test_cleaning_fee_only_on_properties(cottage, chef_service):
    assert isinstance(cottage, Property)
    assert cottage.cleaning_fee_amount == cottage.cleaning_fee
    assert isinstance(chef_service, Service)
    assert chef_service.cleaning_fee_amount is None

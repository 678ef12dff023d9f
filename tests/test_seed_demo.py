import pytest
from django.core.management import call_command

from gestao.models import Contact, Organization, PaymentMethod, PriceTable, Product, User

pytestmark = pytest.mark.django_db


def test_seed_demo_creates_usable_organization():
    call_command('seed_demo', '--organization', 'Demo', '--clients', '3', '--seed', '1')

    organization = Organization.objects.get(name='Demo')
    assert User.objects.filter(organization=organization).count() == 1
    assert PaymentMethod.objects.filter(organization=organization, type='RECEIVABLE').exists()
    assert PriceTable.objects.get(organization=organization).is_default

    products = Product.objects.filter(organization=organization)
    assert products.count() == 5
    assert all(len(p.bar_code) == 13 for p in products)

    clients = Contact.objects.filter(organization=organization, type=Contact.ContactType.CLIENT)
    assert clients.count() == 3
    assert all(c.addresses.exists() for c in clients)


def test_seed_demo_is_rerunnable():
    call_command('seed_demo', '--organization', 'Demo', '--clients', '0')
    call_command('seed_demo', '--organization', 'Demo', '--clients', '0')

    assert Organization.objects.filter(name='Demo').count() == 1
    assert Product.objects.filter(organization__name='Demo').count() == 5

from decimal import Decimal

import pytest
from rest_framework.test import APIClient

from gestao.models import (
    Address,
    Contact,
    Organization,
    PaymentMethod,
    PriceItem,
    PriceTable,
    Product,
    User,
)


@pytest.fixture
def organization(db):
    return Organization.objects.create(name='Distribuidora Teste')


@pytest.fixture
def other_organization(db):
    return Organization.objects.create(name='Outra Distribuidora')


@pytest.fixture
def user(organization):
    return User.objects.create_user(username='operador', password='senha', organization=organization)


@pytest.fixture
def other_user(other_organization):
    return User.objects.create_user(username='intruso', password='senha', organization=other_organization)


@pytest.fixture
def api_client(user):
    client = APIClient()
    client.force_login(user)
    return client


@pytest.fixture
def client_contact(organization):
    return Contact.objects.create(
        organization=organization,
        name='Maria da Silva',
        type=Contact.ContactType.CLIENT,
    )


@pytest.fixture
def address(client_contact):
    return Address.objects.create(contact=client_contact, street='Rua das Flores', number='100')


@pytest.fixture
def delivery_person(organization):
    return Contact.objects.create(
        organization=organization,
        name='João Entregador',
        type=Contact.ContactType.EMPLOYEE,
        is_delivery_person=True,
    )


@pytest.fixture
def water(organization):
    return Product.objects.create(
        organization=organization,
        internal_code='0001',
        name='Água 20L',
        current_stock=50,
    )


@pytest.fixture
def gas(organization):
    return Product.objects.create(
        organization=organization,
        internal_code='0002',
        name='Gás P13',
        current_stock=10,
    )


@pytest.fixture
def price_table(organization, water, gas):
    table = PriceTable.objects.create(organization=organization, name='Padrão', is_default=True)
    PriceItem.objects.create(price_table=table, product=water, price=Decimal('12.00'))
    PriceItem.objects.create(price_table=table, product=gas, price=Decimal('110.00'))
    return table


@pytest.fixture
def cash_method(organization):
    return PaymentMethod.objects.create(
        organization=organization, name='Dinheiro', type=PaymentMethod.MethodType.CASH
    )


@pytest.fixture
def card_method(organization):
    return PaymentMethod.objects.create(
        organization=organization, name='Cartão de Débito', type=PaymentMethod.MethodType.DEBIT_CARD
    )


@pytest.fixture
def receivable_method(organization):
    return PaymentMethod.objects.create(
        organization=organization,
        name='Fiado 30 dias',
        type=PaymentMethod.MethodType.RECEIVABLE,
        due_days=30,
    )

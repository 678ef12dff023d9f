import pytest

from gestao.models import CashMovement, CashRegister, IdempotencyKey, OrderPayment

pytestmark = pytest.mark.django_db


@pytest.fixture
def open_register(api_client):
    response = api_client.post('/api/cash-registers/', {'initial_amount': '100.00'}, format='json')
    assert response.status_code == 201
    return response.json()


def test_repeated_request_is_replayed(api_client, open_register):
    payload = {'type': 'DEPOSIT', 'value': '25.00', 'description': 'Suprimento'}

    first = api_client.post('/api/cash-movements/', payload, format='json', HTTP_IDEMPOTENCY_KEY='mov-1')
    second = api_client.post('/api/cash-movements/', payload, format='json', HTTP_IDEMPOTENCY_KEY='mov-1')

    assert first.status_code == second.status_code == 201
    assert second.json() == first.json()
    assert second['Idempotent-Replayed'] == 'true'
    assert CashMovement.objects.count() == 1


def test_distinct_keys_execute_twice(api_client, open_register):
    payload = {'type': 'DEPOSIT', 'value': '25.00', 'description': 'Suprimento'}

    api_client.post('/api/cash-movements/', payload, format='json', HTTP_IDEMPOTENCY_KEY='a')
    api_client.post('/api/cash-movements/', payload, format='json', HTTP_IDEMPOTENCY_KEY='b')

    assert CashMovement.objects.count() == 2


def test_key_reused_on_other_endpoint_conflicts(api_client, open_register):
    api_client.post(
        '/api/cash-movements/',
        {'type': 'DEPOSIT', 'value': '25.00', 'description': 'Suprimento'},
        format='json',
        HTTP_IDEMPOTENCY_KEY='k',
    )

    response = api_client.put(
        f"/api/cash-registers/{open_register['id']}/close/",
        {'final_amount': '125.00'},
        format='json',
        HTTP_IDEMPOTENCY_KEY='k',
    )

    assert response.status_code == 409
    assert response.json()['error']['code'] == 'conflict'
    assert CashRegister.objects.get(pk=open_register['id']).status == CashRegister.STATUS_OPEN


def test_failed_request_is_not_stored(api_client, open_register):
    payload = {'type': 'WITHDRAWAL', 'value': '500.00', 'description': 'Sangria'}

    response = api_client.post('/api/cash-movements/', payload, format='json', HTTP_IDEMPOTENCY_KEY='w')
    assert response.status_code == 422
    assert not IdempotencyKey.objects.exists()

    payload['value'] = '50.00'
    response = api_client.post('/api/cash-movements/', payload, format='json', HTTP_IDEMPOTENCY_KEY='w')
    assert response.status_code == 201


def test_keys_are_scoped_by_organization(api_client, open_register, other_user):
    from rest_framework.test import APIClient

    other = APIClient()
    other.force_login(other_user)
    other.post('/api/cash-registers/', {'initial_amount': '0'}, format='json')

    payload = {'type': 'DEPOSIT', 'value': '10.00', 'description': 'Suprimento'}
    api_client.post('/api/cash-movements/', payload, format='json', HTTP_IDEMPOTENCY_KEY='same')
    other.post('/api/cash-movements/', payload, format='json', HTTP_IDEMPOTENCY_KEY='same')

    assert CashMovement.objects.count() == 2


def test_repeated_order_payment_add_is_replayed(api_client, client_contact, address, water, cash_method, card_method):
    order = api_client.post('/api/orders/', {
        'client': client_contact.pk,
        'address': address.pk,
        'items': [{'product': water.pk, 'quantity': 1, 'unit_price': '10.00'}],
        'payments': [{'payment_method': cash_method.pk}],
    }, format='json').json()
    url = f"/api/orders/{order['id']}/payments/"
    payload = {'payment_method': card_method.pk, 'value': '5.00'}

    first = api_client.post(url, payload, format='json', HTTP_IDEMPOTENCY_KEY='pay-1')
    second = api_client.post(url, payload, format='json', HTTP_IDEMPOTENCY_KEY='pay-1')

    assert first.status_code == second.status_code == 201
    assert second['Idempotent-Replayed'] == 'true'
    assert second.json() == first.json()
    assert OrderPayment.objects.filter(order_id=order['id']).count() == 2

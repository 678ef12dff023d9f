from django.db import transaction
from django.db.models import F, ProtectedError, Q
from django.utils import timezone
from rest_framework import mixins, status
from rest_framework.decorators import action
from rest_framework.permissions import IsAuthenticated
from rest_framework.response import Response
from rest_framework.viewsets import GenericViewSet, ModelViewSet

from .exceptions import ConflictError, InvalidStateError, NotFoundError, ValidationError
from .models import (
    CashMovement,
    CashRegister,
    Contact,
    Order,
    Organization,
    PaymentMethod,
    PriceTable,
    Product,
    Receivable,
    ReceivablePayment,
)
from .permissions import HasActiveOrganization
from .serializers import (
    AddOrderPaymentSerializer,
    CashMovementSerializer,
    CashRegisterSerializer,
    CloseCashRegisterSerializer,
    ContactSerializer,
    OrderSerializer,
    OrderStatusSerializer,
    OrganizationSerializer,
    PaymentMethodSerializer,
    PriceTableSerializer,
    ProductSerializer,
    ReceivablePaymentSerializer,
    ReceivableSerializer,
)
from .services import cash_register as cash_service
from .services import orders as order_service
from .services import receivables as receivable_service
from .services.idempotency import idempotent

# tipos que o operador lança à mão; vendas e recebimentos vêm dos pedidos/contas
MANUAL_MOVEMENT_TYPES = (
    CashMovement.MovementType.SALE,
    CashMovement.MovementType.WITHDRAWAL,
    CashMovement.MovementType.DEPOSIT,
    CashMovement.MovementType.ADJUSTMENT,
)

MONEY_SUMMARY_KEYS = (
    'initial_amount',
    'entries',
    'exits',
    'balance',
    'final_amount',
    'reconciliation_difference',
)


def _money(value):
    return None if value is None else f'{value:.2f}'


def _record_status(request, default):
    value = request.query_params.get('status', '')
    return int(value) if value.isdigit() else default


class OrganizationScopedMixin:
    """Tudo que a API lê ou grava fica restrito à organização do usuário."""

    permission_classes = [IsAuthenticated, HasActiveOrganization]
    organization_lookup = 'organization'

    def get_queryset(self):
        return super().get_queryset().filter(
            **{self.organization_lookup: self.request.user.organization_id}
        )

    def perform_create(self, serializer):
        serializer.save(organization=self.request.user.organization)


# ─────────────────────────────────────────────────────────────────────────────
# CADASTROS
# ─────────────────────────────────────────────────────────────────────────────

class OrganizationViewSet(OrganizationScopedMixin, GenericViewSet):
    """GET /api/organization/ devolve a organização do usuário logado."""

    queryset = Organization.objects.all()
    serializer_class = OrganizationSerializer
    organization_lookup = 'pk'

    def list(self, request):
        organization = self.get_queryset().get()
        return Response(self.get_serializer(organization).data)


class ContactViewSet(OrganizationScopedMixin, ModelViewSet):
    queryset = Contact.objects.prefetch_related('phones', 'addresses')
    serializer_class = ContactSerializer

    def get_queryset(self):
        queryset = super().get_queryset()
        queryset = queryset.filter(status=_record_status(self.request, Contact.STATUS_ACTIVE))

        search = self.request.query_params.get('q')
        contact_type = self.request.query_params.get('type')

        if search:
            queryset = queryset.filter(
                Q(name__icontains=search) |
                Q(email__icontains=search) |
                Q(document__icontains=search)
            )
        if contact_type:
            queryset = queryset.filter(type=contact_type)
        if self.request.query_params.get('delivery_person') == 'true':
            queryset = queryset.filter(is_delivery_person=True)

        return queryset

    @transaction.atomic
    def perform_create(self, serializer):
        super().perform_create(serializer)

    @transaction.atomic
    def perform_update(self, serializer):
        serializer.save()

    def perform_destroy(self, instance):
        instance.status = Contact.STATUS_DELETED
        instance.save(update_fields=['status', 'updated_at'])


class ProductViewSet(OrganizationScopedMixin, ModelViewSet):
    queryset = Product.objects.all()
    serializer_class = ProductSerializer

    def get_queryset(self):
        queryset = super().get_queryset()
        queryset = queryset.filter(status=_record_status(self.request, Product.STATUS_ACTIVE))

        search = self.request.query_params.get('q')
        if search:
            queryset = queryset.filter(
                Q(name__icontains=search) |
                Q(internal_code__icontains=search) |
                Q(bar_code__icontains=search)
            )
        if self.request.query_params.get('low_stock') == 'true':
            queryset = queryset.filter(current_stock__lt=F('minimum_stock'))

        return queryset

    def perform_destroy(self, instance):
        instance.status = Product.STATUS_DELETED
        instance.save(update_fields=['status', 'updated_at'])


class PriceTableViewSet(OrganizationScopedMixin, ModelViewSet):
    queryset = PriceTable.objects.prefetch_related('items')
    serializer_class = PriceTableSerializer

    def _clear_other_defaults(self, table):
        if table.is_default:
            PriceTable.objects.filter(
                organization_id=table.organization_id,
                is_default=True,
            ).exclude(pk=table.pk).update(is_default=False)

    @transaction.atomic
    def perform_create(self, serializer):
        table = serializer.save(organization=self.request.user.organization)
        self._clear_other_defaults(table)

    @transaction.atomic
    def perform_update(self, serializer):
        table = serializer.save()
        self._clear_other_defaults(table)


class PaymentMethodViewSet(OrganizationScopedMixin, ModelViewSet):
    queryset = PaymentMethod.objects.all()
    serializer_class = PaymentMethodSerializer

    def get_queryset(self):
        queryset = super().get_queryset()
        if self.request.query_params.get('active') == 'true':
            queryset = queryset.filter(active=True)
        return queryset

    def perform_destroy(self, instance):
        try:
            instance.delete()
        except ProtectedError:
            raise ConflictError(
                'Forma de pagamento já usada em pedidos; desative-a em vez de excluir.'
            )


# ─────────────────────────────────────────────────────────────────────────────
# PEDIDOS
# ─────────────────────────────────────────────────────────────────────────────

class OrderViewSet(OrganizationScopedMixin, ModelViewSet):
    queryset = Order.objects.select_related('client', 'address', 'delivery').prefetch_related(
        'items', 'payments__payment_method'
    )
    serializer_class = OrderSerializer

    def get_queryset(self):
        queryset = super().get_queryset()

        client_id = self.request.query_params.get('client')
        order_status = self.request.query_params.get('status')

        if client_id:
            queryset = queryset.filter(client_id=client_id)
        if order_status:
            queryset = queryset.filter(status=order_status)

        return queryset

    def _respond(self, order, status_code=status.HTTP_200_OK):
        # relê sem os filtros de listagem (?status=, ?client=)
        order = self.queryset.get(pk=order.pk)
        return Response(OrderSerializer(order, context=self.get_serializer_context()).data, status=status_code)

    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        order = order_service.create_order(request.user, serializer.validated_data)
        return self._respond(order, status.HTTP_201_CREATED)

    def update(self, request, *args, **kwargs):
        partial = kwargs.pop('partial', False)
        instance = self.get_object()
        serializer = self.get_serializer(instance, data=request.data, partial=partial)
        serializer.is_valid(raise_exception=True)
        order = order_service.update_order(instance, serializer.validated_data)
        return self._respond(order)

    def destroy(self, request, *args, **kwargs):
        order = order_service.cancel_order(self.get_object(), request.user)
        return self._respond(order)

    @action(detail=True, methods=['post'], url_path='status')
    @idempotent
    def change_status(self, request, pk=None):
        order = self.get_object()
        serializer = OrderStatusSerializer(data=request.data, context=self.get_serializer_context())
        serializer.is_valid(raise_exception=True)

        new_status = serializer.validated_data.get('status')
        delivery_person = serializer.validated_data.get('delivery_person')

        if new_status:
            order = order_service.change_status(order, new_status, request.user, delivery_person)
        else:
            order = order_service.advance_status(order, request.user, delivery_person)
        return self._respond(order)

    @action(detail=True, methods=['post'], url_path='payments')
    @idempotent
    def add_payment(self, request, pk=None):
        order = self.get_object()
        serializer = AddOrderPaymentSerializer(data=request.data, context=self.get_serializer_context())
        serializer.is_valid(raise_exception=True)
        order = order_service.add_payment(
            order,
            serializer.validated_data['payment_method'],
            serializer.validated_data.get('value'),
        )
        return self._respond(order, status.HTTP_201_CREATED)

    @action(detail=True, methods=['delete'], url_path=r'payments/(?P<method_id>\d+)')
    @idempotent
    def remove_payment(self, request, pk=None, method_id=None):
        order = self.get_object()
        order = order_service.remove_payment(order, int(method_id))
        return self._respond(order)


# ─────────────────────────────────────────────────────────────────────────────
# CONTAS A RECEBER
# ─────────────────────────────────────────────────────────────────────────────

class ReceivableViewSet(OrganizationScopedMixin, ModelViewSet):
    queryset = Receivable.objects.select_related('client').prefetch_related('payments')
    serializer_class = ReceivableSerializer

    def get_queryset(self):
        queryset = super().get_queryset()
        today = timezone.localdate()
        pending = (Receivable.STATUS_OPEN, Receivable.STATUS_PARTIAL_RECEIVED)

        client_id = self.request.query_params.get('client')
        if client_id:
            queryset = queryset.filter(client_id=client_id)

        # OVERDUE não é gravado: vencidas são as pendentes com data passada
        receivable_status = self.request.query_params.get('status')
        if receivable_status == Receivable.STATUS_OVERDUE:
            queryset = queryset.filter(status__in=pending, due_date__lt=today)
        elif receivable_status in pending:
            queryset = queryset.filter(status=receivable_status, due_date__gte=today)
        elif receivable_status:
            queryset = queryset.filter(status=receivable_status)

        return queryset

    def perform_create(self, serializer):
        total = receivable_service.validate_total_value(None, serializer.validated_data['total_value'])
        serializer.save(organization=self.request.user.organization, total_value=total)

    @transaction.atomic
    def perform_update(self, serializer):
        total_value = serializer.validated_data.pop('total_value', None)
        receivable = serializer.save()
        if total_value is not None:
            serializer.instance = receivable_service.update_total_value(receivable, total_value)

    def perform_destroy(self, instance):
        if instance.payments.exists():
            raise InvalidStateError('Conta com pagamentos registrados não pode ser excluída.')
        instance.delete()


class ReceivablePaymentViewSet(OrganizationScopedMixin,
                               mixins.CreateModelMixin,
                               mixins.ListModelMixin,
                               mixins.RetrieveModelMixin,
                               GenericViewSet):
    queryset = ReceivablePayment.objects.select_related('receivable', 'payment_method')
    serializer_class = ReceivablePaymentSerializer
    organization_lookup = 'receivable__organization'

    def get_queryset(self):
        queryset = super().get_queryset()
        receivable_id = self.request.query_params.get('receivable')
        if receivable_id:
            queryset = queryset.filter(receivable_id=receivable_id)
        return queryset

    @idempotent
    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        payment = receivable_service.register_payment(
            data['receivable'],
            data['value'],
            request.user,
            payment_date=data.get('payment_date'),
            observation=data.get('observation', ''),
            payment_method=data.get('payment_method'),
        )
        return Response(self.get_serializer(payment).data, status=status.HTTP_201_CREATED)


# ─────────────────────────────────────────────────────────────────────────────
# CAIXA
# ─────────────────────────────────────────────────────────────────────────────

class CashRegisterViewSet(OrganizationScopedMixin,
                          mixins.CreateModelMixin,
                          mixins.ListModelMixin,
                          mixins.RetrieveModelMixin,
                          GenericViewSet):
    queryset = CashRegister.objects.prefetch_related('movements')
    serializer_class = CashRegisterSerializer

    @idempotent
    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        register = cash_service.open_register(
            request.user,
            serializer.validated_data.get('initial_amount', 0),
        )
        return Response(self.get_serializer(register).data, status=status.HTTP_201_CREATED)

    @action(detail=False, methods=['get'])
    def current(self, request):
        register = cash_service.current_register(request.user.organization_id)
        if register is None:
            raise NotFoundError('Nenhum caixa aberto.')
        return Response(self.get_serializer(register).data)

    @action(detail=True, methods=['put'])
    @idempotent
    def close(self, request, pk=None):
        register = self.get_object()
        serializer = CloseCashRegisterSerializer(data=request.data)
        serializer.is_valid(raise_exception=True)

        register, _difference = cash_service.close_register(
            register, serializer.validated_data['final_amount']
        )
        return Response(self.get_serializer(register).data)

    @action(detail=True, methods=['get'])
    def summary(self, request, pk=None):
        summary = cash_service.summarize(self.get_object())
        summary['by_type'] = {key: _money(value) for key, value in summary['by_type'].items()}
        for key in MONEY_SUMMARY_KEYS:
            summary[key] = _money(summary[key])
        return Response(summary)


class CashMovementViewSet(OrganizationScopedMixin,
                          mixins.CreateModelMixin,
                          mixins.ListModelMixin,
                          mixins.RetrieveModelMixin,
                          GenericViewSet):
    queryset = CashMovement.objects.select_related('payment_method')
    serializer_class = CashMovementSerializer
    organization_lookup = 'cash_register__organization'

    def get_queryset(self):
        queryset = super().get_queryset()

        register_id = self.request.query_params.get('cash_register')
        movement_type = self.request.query_params.get('type')

        if register_id:
            queryset = queryset.filter(cash_register_id=register_id)
        if movement_type:
            queryset = queryset.filter(type=movement_type)

        return queryset

    @idempotent
    def create(self, request, *args, **kwargs):
        serializer = self.get_serializer(data=request.data)
        serializer.is_valid(raise_exception=True)
        data = serializer.validated_data

        if data['type'] not in MANUAL_MOVEMENT_TYPES:
            raise ValidationError(
                'Este tipo de movimentação é gerado automaticamente.',
                {'field': 'type'},
            )

        register = data.get('cash_register') or cash_service.current_register(
            request.user.organization_id
        )
        if register is None:
            raise InvalidStateError('Nenhum caixa aberto.')

        movement = cash_service.post_movement(
            register,
            data['type'],
            data['value'],
            data.get('description', ''),
            request.user,
            payment_method=data.get('payment_method'),
        )
        return Response(self.get_serializer(movement).data, status=status.HTTP_201_CREATED)

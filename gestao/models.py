import uuid
from decimal import Decimal

from django.contrib.auth.models import AbstractUser
from django.core.serializers.json import DjangoJSONEncoder
from django.db import models
from django.db.models import Q, Sum
from django.utils import timezone

from gestao.exceptions import InvalidStateError
from gestao.services.ledger import register_balance, signed_value
from gestao.services.order_totals import line_total, recompute
from gestao.services.receivable_status import compute_status, effective_status


class Organization(models.Model):
    uid = models.UUIDField(default=uuid.uuid4, editable=False, unique=True)
    name = models.CharField(max_length=255)
    active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name


class User(AbstractUser):
    ROLE_CHOICES = (
        ('admin', 'Administrador'),
        ('user', 'Usuário'),
    )

    organization = models.ForeignKey(
        Organization,
        on_delete=models.CASCADE,
        related_name='users',
        null=True,
        blank=True
    )

    role = models.CharField(
        max_length=10,
        choices=ROLE_CHOICES,
        default='user'
    )

    timezone = models.CharField(max_length=64, default='America/Sao_Paulo')

    def __str__(self):
        return self.username


# ─────────────────────────────────────────────────────────────────────────────
# CONTATOS
# ─────────────────────────────────────────────────────────────────────────────

class Contact(models.Model):
    class ContactType(models.TextChoices):
        CLIENT = 'CLIENT', 'Cliente'
        SUPPLIER = 'SUPPLIER', 'Fornecedor'
        EMPLOYEE = 'EMPLOYEE', 'Funcionário'
        CARRIER = 'CARRIER', 'Transportadora'
        CONTACT = 'CONTACT', 'Contato'

    STATUS_ACTIVE = 1
    STATUS_DELETED = 0

    uid = models.UUIDField(default=uuid.uuid4, editable=False, unique=True)
    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name='contacts')

    name = models.CharField('Nome / Razão Social', max_length=255)
    type = models.CharField(max_length=20, choices=ContactType.choices)
    document = models.CharField('CPF / CNPJ', max_length=20, blank=True, null=True)
    email = models.EmailField(blank=True, null=True)
    birth_date = models.DateField(blank=True, null=True)
    observation = models.TextField(blank=True, null=True)
    is_delivery_person = models.BooleanField('Entregador', default=False)

    # soft delete: 1 ativo, 0 excluído
    status = models.IntegerField(default=STATUS_ACTIVE)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['name']

    def __str__(self):
        return self.name


class Phone(models.Model):
    contact = models.ForeignKey(Contact, on_delete=models.CASCADE, related_name='phones')
    number = models.CharField('Telefone', max_length=30)
    is_primary = models.BooleanField(default=False)

    def __str__(self):
        return self.number


class Address(models.Model):
    contact = models.ForeignKey(Contact, on_delete=models.CASCADE, related_name='addresses')
    name = models.CharField(max_length=100, default='Endereço 01')
    zip_code = models.CharField('CEP', max_length=9, blank=True, null=True)
    street = models.CharField('Logradouro', max_length=255)
    number = models.CharField('Número', max_length=20, blank=True, null=True)
    complement = models.CharField('Complemento', max_length=100, blank=True, null=True)
    neighborhood = models.CharField('Bairro', max_length=100, blank=True, null=True)
    city = models.CharField('Cidade', max_length=100, blank=True, null=True)
    state = models.CharField('UF', max_length=2, blank=True, null=True)
    reference = models.CharField('Referência', max_length=255, blank=True, null=True)
    is_primary = models.BooleanField(default=False)

    def __str__(self):
        return f"{self.street}, {self.number or 's/n'}"


# ─────────────────────────────────────────────────────────────────────────────
# PRODUTOS / TABELAS DE PREÇO
# ─────────────────────────────────────────────────────────────────────────────

class Product(models.Model):
    class ProductType(models.TextChoices):
        SIMPLE = 'SIMPLE', 'Simples'
        CONTAINER = 'CONTAINER', 'Vasilhame'
        WITH_CONTAINER_RETURN = 'WITH_CONTAINER_RETURN', 'Com retorno de vasilhame'

    STATUS_ACTIVE = 1
    STATUS_DELETED = 0

    uid = models.UUIDField(default=uuid.uuid4, editable=False, unique=True)
    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name='products')
    internal_code = models.CharField(max_length=50)
    bar_code = models.CharField(max_length=14, blank=True, null=True)
    name = models.CharField(max_length=255)
    type = models.CharField(max_length=30, choices=ProductType.choices, default=ProductType.SIMPLE)
    cost_value = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    current_stock = models.IntegerField(default=0)
    minimum_stock = models.IntegerField(default=0)
    image_url = models.URLField(blank=True, null=True)
    container_product = models.ForeignKey(
        'self',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='products_with_container'
    )
    status = models.IntegerField(default=STATUS_ACTIVE)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['name']

    def __str__(self):
        return self.name

    @property
    def below_minimum_stock(self):
        return self.current_stock < self.minimum_stock


class PriceTable(models.Model):
    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name='price_tables')
    name = models.CharField(max_length=100)
    is_default = models.BooleanField(default=False)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return self.name

    def price_for(self, product):
        item = self.items.filter(product=product).first()
        return item.price if item else None


class PriceItem(models.Model):
    price_table = models.ForeignKey(PriceTable, on_delete=models.CASCADE, related_name='items')
    product = models.ForeignKey(Product, on_delete=models.CASCADE, related_name='price_items')
    price = models.DecimalField(max_digits=10, decimal_places=2)

    class Meta:
        unique_together = ('price_table', 'product')

    def __str__(self):
        return f"{self.price_table.name} - {self.product.name}: {self.price}"


# ─────────────────────────────────────────────────────────────────────────────
# FORMAS DE PAGAMENTO
# ─────────────────────────────────────────────────────────────────────────────

class PaymentMethod(models.Model):
    class MethodType(models.TextChoices):
        CASH = 'CASH', 'Dinheiro'
        CREDIT_CARD = 'CREDIT_CARD', 'Cartão de Crédito'
        DEBIT_CARD = 'DEBIT_CARD', 'Cartão de Débito'
        PIX = 'PIX', 'PIX'
        TRANSFER = 'TRANSFER', 'Transferência'
        CHECK = 'CHECK', 'Cheque'
        RECEIVABLE = 'RECEIVABLE', 'A Receber (fiado)'
        OTHER = 'OTHER', 'Outros'

    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name='payment_methods')
    name = models.CharField(max_length=100)
    type = models.CharField(max_length=20, choices=MethodType.choices)
    due_days = models.PositiveIntegerField(default=0)
    active = models.BooleanField(default=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['name']

    def __str__(self):
        return self.name

    @property
    def is_cash(self):
        return self.type == self.MethodType.CASH


# ─────────────────────────────────────────────────────────────────────────────
# PEDIDOS
# ─────────────────────────────────────────────────────────────────────────────

class Order(models.Model):
    STATUS_NEW = 'NEW'
    STATUS_DELIVERING = 'DELIVERING'
    STATUS_DELIVERED = 'DELIVERED'
    STATUS_COMPLETED = 'COMPLETED'
    STATUS_CANCELED = 'CANCELED'

    STATUS_CHOICES = [
        (STATUS_NEW, 'Novo'),
        (STATUS_DELIVERING, 'Em Entrega'),
        (STATUS_DELIVERED, 'Entregue'),
        (STATUS_COMPLETED, 'Concluído'),
        (STATUS_CANCELED, 'Cancelado'),
    ]

    STATUS_TRANSITIONS = {
        STATUS_NEW: [
            STATUS_DELIVERING,
            STATUS_COMPLETED,
            STATUS_CANCELED,
        ],
        STATUS_DELIVERING: [
            STATUS_DELIVERED,
            STATUS_CANCELED,
        ],
        STATUS_DELIVERED: [
            STATUS_COMPLETED,
            STATUS_CANCELED,
        ],
    }

    uid = models.UUIDField(default=uuid.uuid4, editable=False, unique=True)
    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name='orders')
    client = models.ForeignKey(Contact, on_delete=models.PROTECT, related_name='orders')
    address = models.ForeignKey(Address, on_delete=models.PROTECT, related_name='orders')
    price_table = models.ForeignKey(PriceTable, on_delete=models.SET_NULL, null=True, blank=True, related_name='orders')
    order_date = models.DateTimeField(default=timezone.now)
    delivery_fee = models.DecimalField(max_digits=10, decimal_places=2, default=0)

    # derivado: soma dos itens + taxa de entrega, gravado por recalculate_total()
    total_value = models.DecimalField(max_digits=10, decimal_places=2, default=0, editable=False)

    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_NEW)
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['-order_date']

    def __str__(self):
        return f"Pedido #{self.pk}"

    def can_change_status_to(self, new_status):
        return new_status in self.STATUS_TRANSITIONS.get(self.status, [])

    def next_status(self):
        for status in self.STATUS_TRANSITIONS.get(self.status, []):
            if status != self.STATUS_CANCELED:
                return status
        return None

    def can_edit(self):
        return self.status == self.STATUS_NEW

    def totals(self):
        return recompute(
            self.items.values('product_id', 'quantity', 'unit_price'),
            self.delivery_fee or Decimal('0.00'),
        )

    def items_total(self):
        return self.totals().items_total

    def recalculate_total(self, save=True):
        self.total_value = self.totals().total_value
        if save:
            self.save(update_fields=['total_value', 'updated_at'])
        return self.total_value


class OrderItem(models.Model):
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name='items')
    product = models.ForeignKey(Product, on_delete=models.PROTECT, related_name='order_items')
    quantity = models.PositiveIntegerField()
    unit_price = models.DecimalField(max_digits=10, decimal_places=2)
    total_price = models.DecimalField(max_digits=10, decimal_places=2, editable=False)

    class Meta:
        ordering = ['id']

    def save(self, *args, **kwargs):
        self.total_price = line_total(self.quantity, self.unit_price)
        super().save(*args, **kwargs)

    def __str__(self):
        return f"{self.quantity} x {self.product.name}"


class OrderPayment(models.Model):
    order = models.ForeignKey(Order, on_delete=models.CASCADE, related_name='payments')
    payment_method = models.ForeignKey(PaymentMethod, on_delete=models.PROTECT, related_name='order_payments')
    value = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    change = models.DecimalField('Troco', max_digits=10, decimal_places=2, default=0)

    class Meta:
        ordering = ['id']
        unique_together = ('order', 'payment_method')

    def __str__(self):
        return f"{self.payment_method.name}: {self.value}"

    @property
    def net_value(self):
        return self.value - self.change


class Delivery(models.Model):
    order = models.OneToOneField(Order, on_delete=models.CASCADE, related_name='delivery')
    delivery_person = models.ForeignKey(
        Contact,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='deliveries'
    )
    assigned_by = models.ForeignKey(User, on_delete=models.PROTECT, related_name='assigned_deliveries')
    departure_datetime = models.DateTimeField(null=True, blank=True)
    delivery_datetime = models.DateTimeField(null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    def __str__(self):
        return f"Entrega do {self.order}"


# ─────────────────────────────────────────────────────────────────────────────
# CONTAS A RECEBER
# ─────────────────────────────────────────────────────────────────────────────

class Receivable(models.Model):
    STATUS_OPEN = 'OPEN'
    STATUS_PARTIAL_RECEIVED = 'PARTIAL_RECEIVED'
    STATUS_RECEIVED = 'RECEIVED'
    STATUS_OVERDUE = 'OVERDUE'

    STATUS_CHOICES = [
        (STATUS_OPEN, 'Em aberto'),
        (STATUS_PARTIAL_RECEIVED, 'Recebido parcialmente'),
        (STATUS_RECEIVED, 'Recebido'),
    ]

    uid = models.UUIDField(default=uuid.uuid4, editable=False, unique=True)
    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name='receivables')
    client = models.ForeignKey(Contact, on_delete=models.PROTECT, related_name='receivables')
    order = models.ForeignKey(Order, on_delete=models.SET_NULL, null=True, blank=True, related_name='receivables')
    description = models.CharField(max_length=255, blank=True)
    due_date = models.DateField()
    total_value = models.DecimalField(max_digits=10, decimal_places=2)

    # derivados dos pagamentos; nunca editados diretamente
    received_value = models.DecimalField(max_digits=10, decimal_places=2, default=0, editable=False)
    status = models.CharField(max_length=20, choices=STATUS_CHOICES, default=STATUS_OPEN, editable=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        ordering = ['due_date', 'id']

    def __str__(self):
        return f"{self.client.name} - {self.total_value} ({self.due_date})"

    @property
    def outstanding_value(self):
        return max(self.total_value - self.received_value, Decimal('0.00'))

    @property
    def effective_status(self):
        return effective_status(self.status, self.due_date, timezone.localdate())

    @property
    def is_overdue(self):
        return self.effective_status == self.STATUS_OVERDUE

    def refresh_totals(self, save=True):
        self.received_value = self.payments.aggregate(total=Sum('value'))['total'] or Decimal('0.00')
        self.status = compute_status(self.received_value, self.total_value, self.status)
        if save:
            self.save(update_fields=['received_value', 'status', 'updated_at'])
        return self.status


class ReceivablePayment(models.Model):
    receivable = models.ForeignKey(Receivable, on_delete=models.CASCADE, related_name='payments')
    cash_register = models.ForeignKey(
        'CashRegister',
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='receivable_payments'
    )
    payment_method = models.ForeignKey(
        PaymentMethod,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='receivable_payments'
    )
    payment_date = models.DateTimeField(default=timezone.now)
    value = models.DecimalField(max_digits=10, decimal_places=2)
    observation = models.TextField(blank=True)
    created_by = models.ForeignKey(User, on_delete=models.PROTECT, related_name='receivable_payments')
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['payment_date', 'id']

    def __str__(self):
        return f"{self.receivable} - {self.value}"

    # lançamento imutável
    def save(self, *args, **kwargs):
        if self.pk is not None:
            raise InvalidStateError('Pagamentos registrados não podem ser alterados.')
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise InvalidStateError('Pagamentos registrados não podem ser excluídos.')


# ─────────────────────────────────────────────────────────────────────────────
# CAIXA
# ─────────────────────────────────────────────────────────────────────────────

class CashRegister(models.Model):
    STATUS_OPEN = 'OPEN'
    STATUS_CLOSED = 'CLOSED'

    STATUS_CHOICES = [
        (STATUS_OPEN, 'Aberto'),
        (STATUS_CLOSED, 'Fechado'),
    ]

    uid = models.UUIDField(default=uuid.uuid4, editable=False, unique=True)
    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name='cash_registers')
    user = models.ForeignKey(User, on_delete=models.PROTECT, related_name='cash_registers')
    status = models.CharField(max_length=10, choices=STATUS_CHOICES, default=STATUS_OPEN)
    opening_date = models.DateTimeField(default=timezone.now)
    closing_date = models.DateTimeField(null=True, blank=True)
    initial_amount = models.DecimalField(max_digits=10, decimal_places=2, default=0)
    final_amount = models.DecimalField(max_digits=10, decimal_places=2, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        ordering = ['-opening_date']
        constraints = [
            models.UniqueConstraint(
                fields=['organization'],
                condition=Q(status='OPEN'),
                name='unique_open_cash_register_per_organization',
            ),
        ]

    def __str__(self):
        return f"Caixa {self.opening_date:%d/%m/%Y %H:%M} ({self.get_status_display()})"

    @property
    def is_open(self):
        return self.status == self.STATUS_OPEN

    @property
    def balance(self):
        return register_balance(
            self.initial_amount,
            self.movements.values_list('type', 'value'),
        )

    @property
    def reconciliation_difference(self):
        if self.final_amount is None:
            return None
        return self.final_amount - self.balance


class CashMovement(models.Model):
    class MovementType(models.TextChoices):
        SALE = 'SALE', 'Venda'
        RECEIVABLE_PAYMENT = 'RECEIVABLE_PAYMENT', 'Recebimento'
        WITHDRAWAL = 'WITHDRAWAL', 'Sangria'
        DEPOSIT = 'DEPOSIT', 'Suprimento'
        ADJUSTMENT = 'ADJUSTMENT', 'Ajuste'

    cash_register = models.ForeignKey(CashRegister, on_delete=models.CASCADE, related_name='movements')
    type = models.CharField(max_length=20, choices=MovementType.choices)
    description = models.CharField(max_length=255)

    # ADJUSTMENT aceita valor negativo (ajuste para menos)
    value = models.DecimalField(max_digits=10, decimal_places=2)

    payment_method = models.ForeignKey(
        PaymentMethod,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='cash_movements'
    )
    order = models.ForeignKey(Order, on_delete=models.SET_NULL, null=True, blank=True, related_name='cash_movements')
    receivable_payment = models.OneToOneField(
        ReceivablePayment,
        on_delete=models.SET_NULL,
        null=True,
        blank=True,
        related_name='cash_movement'
    )
    user = models.ForeignKey(User, on_delete=models.PROTECT, related_name='cash_movements')
    movement_date = models.DateTimeField(default=timezone.now)

    class Meta:
        ordering = ['movement_date', 'id']

    def __str__(self):
        return f"{self.get_type_display()} - {self.value}"

    @property
    def signed_value(self):
        return signed_value(self.type, self.value)

    def save(self, *args, **kwargs):
        if self.pk is not None:
            raise InvalidStateError('Movimentações de caixa não podem ser alteradas.')
        super().save(*args, **kwargs)

    def delete(self, *args, **kwargs):
        raise InvalidStateError('Movimentações de caixa não podem ser excluídas.')


# ─────────────────────────────────────────────────────────────────────────────
# IDEMPOTÊNCIA
# ─────────────────────────────────────────────────────────────────────────────

class IdempotencyKey(models.Model):
    organization = models.ForeignKey(Organization, on_delete=models.CASCADE, related_name='idempotency_keys')
    key = models.CharField(max_length=255)
    endpoint = models.CharField(max_length=255)
    response_status = models.PositiveSmallIntegerField()
    response_body = models.JSONField(encoder=DjangoJSONEncoder, null=True, blank=True)
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        constraints = [
            models.UniqueConstraint(
                fields=['organization', 'key'],
                name='unique_idempotency_key_per_organization',
            ),
        ]

    def __str__(self):
        return f"{self.key} ({self.endpoint})"

from rest_framework import serializers

from .models import (
    Address,
    CashMovement,
    CashRegister,
    Contact,
    Delivery,
    Order,
    OrderItem,
    OrderPayment,
    Organization,
    PaymentMethod,
    Phone,
    PriceItem,
    PriceTable,
    Product,
    Receivable,
    ReceivablePayment,
)


class OrganizationScopedPrimaryKeyField(serializers.PrimaryKeyRelatedField):
    """PK restrito à organização do usuário da requisição."""

    def __init__(self, **kwargs):
        self.scope_filter = kwargs.pop('scope_filter', {})
        self.organization_lookup = kwargs.pop('organization_lookup', 'organization')
        super().__init__(**kwargs)

    def get_queryset(self):
        queryset = super().get_queryset()
        request = self.context.get('request')
        if request is None:
            return queryset.none()
        return queryset.filter(
            **{self.organization_lookup: request.user.organization_id},
            **self.scope_filter,
        )


class OrganizationSerializer(serializers.ModelSerializer):
    class Meta:
        model = Organization
        fields = ['id', 'uid', 'name', 'active', 'created_at']
        read_only_fields = fields


# ─────────────────────────────────────────────────────────────────────────────
# CONTATOS
# ─────────────────────────────────────────────────────────────────────────────

class PhoneSerializer(serializers.ModelSerializer):
    class Meta:
        model = Phone
        fields = ['id', 'number', 'is_primary']
        read_only_fields = ('id',)


class AddressSerializer(serializers.ModelSerializer):
    # id informado identifica um endereço existente do contato
    id = serializers.IntegerField(required=False)

    class Meta:
        model = Address
        fields = [
            'id',
            'name',
            'zip_code',
            'street',
            'number',
            'complement',
            'neighborhood',
            'city',
            'state',
            'reference',
            'is_primary',
        ]


class ContactSerializer(serializers.ModelSerializer):
    phones = PhoneSerializer(many=True, required=False)
    addresses = AddressSerializer(many=True, required=False)

    class Meta:
        model = Contact
        fields = [
            'id',
            'uid',
            'name',
            'type',
            'document',
            'email',
            'birth_date',
            'observation',
            'is_delivery_person',
            'status',
            'phones',
            'addresses',
            'created_at',
        ]
        read_only_fields = ('id', 'uid', 'status', 'created_at')

    def validate_document(self, value):
        if value:
            return ''.join(filter(str.isdigit, value))
        return value

    def create(self, validated_data):
        phones = validated_data.pop('phones', [])
        addresses = validated_data.pop('addresses', [])
        contact = Contact.objects.create(**validated_data)
        self._write_children(contact, phones, addresses)
        return contact

    def update(self, instance, validated_data):
        phones = validated_data.pop('phones', None)
        addresses = validated_data.pop('addresses', None)
        instance = super().update(instance, validated_data)

        if phones is not None:
            instance.phones.all().delete()
            self._write_children(instance, phones, [])

        # endereços usados em pedidos não podem ser apagados: com id atualiza, sem id cria
        if addresses is not None:
            self._update_addresses(instance, addresses)

        return instance

    def _update_addresses(self, contact, addresses):
        existing = {address.pk: address for address in contact.addresses.all()}

        for data in addresses:
            address_id = data.pop('id', None)
            if address_id is None:
                Address.objects.create(contact=contact, **data)
                continue

            address = existing.get(address_id)
            if address is None:
                raise serializers.ValidationError(
                    {'addresses': [f'Endereço {address_id} não pertence a este contato.']}
                )
            for name, value in data.items():
                setattr(address, name, value)
            address.save()

    def _write_children(self, contact, phones, addresses):
        for phone in phones:
            Phone.objects.create(contact=contact, **phone)
        for address in addresses:
            address.pop('id', None)
            Address.objects.create(contact=contact, **address)


# ─────────────────────────────────────────────────────────────────────────────
# PRODUTOS / PREÇOS
# ─────────────────────────────────────────────────────────────────────────────

class ProductSerializer(serializers.ModelSerializer):
    container_product = OrganizationScopedPrimaryKeyField(
        queryset=Product.objects.all(),
        required=False,
        allow_null=True,
    )
    below_minimum_stock = serializers.BooleanField(read_only=True)

    class Meta:
        model = Product
        fields = [
            'id',
            'uid',
            'internal_code',
            'bar_code',
            'name',
            'type',
            'cost_value',
            'current_stock',
            'minimum_stock',
            'below_minimum_stock',
            'image_url',
            'container_product',
            'status',
            'created_at',
        ]
        read_only_fields = ('id', 'uid', 'status', 'created_at')

    def validate_cost_value(self, value):
        if value < 0:
            raise serializers.ValidationError('O custo não pode ser negativo.')
        return value


class PriceItemSerializer(serializers.ModelSerializer):
    product = OrganizationScopedPrimaryKeyField(queryset=Product.objects.all())

    class Meta:
        model = PriceItem
        fields = ['id', 'product', 'price']
        read_only_fields = ('id',)

    def validate_price(self, value):
        if value < 0:
            raise serializers.ValidationError('O preço não pode ser negativo.')
        return value


class PriceTableSerializer(serializers.ModelSerializer):
    items = PriceItemSerializer(many=True, required=False)

    class Meta:
        model = PriceTable
        fields = ['id', 'name', 'is_default', 'items', 'created_at']
        read_only_fields = ('id', 'created_at')

    def validate_items(self, items):
        products = [item['product'].pk for item in items]
        if len(products) != len(set(products)):
            raise serializers.ValidationError('Produto repetido na tabela de preços.')
        return items

    def create(self, validated_data):
        items = validated_data.pop('items', [])
        table = PriceTable.objects.create(**validated_data)
        self._write_items(table, items)
        return table

    def update(self, instance, validated_data):
        items = validated_data.pop('items', None)
        instance = super().update(instance, validated_data)
        if items is not None:
            instance.items.all().delete()
            self._write_items(instance, items)
        return instance

    def _write_items(self, table, items):
        for item in items:
            PriceItem.objects.create(price_table=table, **item)


# ─────────────────────────────────────────────────────────────────────────────
# FORMAS DE PAGAMENTO
# ─────────────────────────────────────────────────────────────────────────────

class PaymentMethodSerializer(serializers.ModelSerializer):
    is_cash = serializers.BooleanField(read_only=True)

    class Meta:
        model = PaymentMethod
        fields = ['id', 'name', 'type', 'due_days', 'active', 'is_cash', 'created_at']
        read_only_fields = ('id', 'created_at')


# ─────────────────────────────────────────────────────────────────────────────
# PEDIDOS
# ─────────────────────────────────────────────────────────────────────────────

class OrderItemSerializer(serializers.ModelSerializer):
    product = OrganizationScopedPrimaryKeyField(
        queryset=Product.objects.all(),
        scope_filter={'status': Product.STATUS_ACTIVE},
    )
    quantity = serializers.IntegerField(min_value=1)
    unit_price = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=0, required=False
    )

    class Meta:
        model = OrderItem
        fields = ['id', 'product', 'quantity', 'unit_price', 'total_price']
        read_only_fields = ('id', 'total_price')


class OrderPaymentSerializer(serializers.ModelSerializer):
    payment_method = OrganizationScopedPrimaryKeyField(
        queryset=PaymentMethod.objects.all(),
        scope_filter={'active': True},
    )
    payment_method_name = serializers.CharField(source='payment_method.name', read_only=True)
    value = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=0, required=False, allow_null=True
    )

    class Meta:
        model = OrderPayment
        fields = ['id', 'payment_method', 'payment_method_name', 'value', 'change']
        read_only_fields = ('id', 'change')


class DeliverySerializer(serializers.ModelSerializer):
    class Meta:
        model = Delivery
        fields = ['delivery_person', 'assigned_by', 'departure_datetime', 'delivery_datetime']
        read_only_fields = fields


class OrderSerializer(serializers.ModelSerializer):
    client = OrganizationScopedPrimaryKeyField(queryset=Contact.objects.all())
    address = OrganizationScopedPrimaryKeyField(
        queryset=Address.objects.all(),
        organization_lookup='contact__organization',
    )
    price_table = OrganizationScopedPrimaryKeyField(
        queryset=PriceTable.objects.all(),
        required=False,
        allow_null=True,
    )
    delivery_fee = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=0, required=False
    )
    items = OrderItemSerializer(many=True, required=False)
    payments = OrderPaymentSerializer(many=True, required=False)
    delivery = DeliverySerializer(read_only=True)
    client_name = serializers.CharField(source='client.name', read_only=True)

    class Meta:
        model = Order
        fields = [
            'id',
            'uid',
            'order_date',
            'client',
            'client_name',
            'address',
            'price_table',
            'delivery_fee',
            'total_value',
            'status',
            'items',
            'payments',
            'delivery',
            'created_at',
            'updated_at',
        ]
        read_only_fields = ('id', 'uid', 'total_value', 'status', 'created_at', 'updated_at')

    def validate(self, attrs):
        if self.instance is None and not attrs.get('payments'):
            raise serializers.ValidationError(
                {'payments': 'Adicione pelo menos uma forma de pagamento.'}
            )

        methods = [p['payment_method'].pk for p in attrs.get('payments', [])]
        if len(methods) != len(set(methods)):
            raise serializers.ValidationError(
                {'payments': 'Forma de pagamento repetida no pedido.'}
            )
        return attrs


class OrderStatusSerializer(serializers.Serializer):
    status = serializers.ChoiceField(choices=Order.STATUS_CHOICES, required=False)
    delivery_person = OrganizationScopedPrimaryKeyField(
        queryset=Contact.objects.all(),
        required=False,
        allow_null=True,
    )


class AddOrderPaymentSerializer(serializers.Serializer):
    payment_method = OrganizationScopedPrimaryKeyField(
        queryset=PaymentMethod.objects.all(),
        scope_filter={'active': True},
    )
    value = serializers.DecimalField(
        max_digits=10, decimal_places=2, min_value=0, required=False, allow_null=True
    )


# ─────────────────────────────────────────────────────────────────────────────
# CONTAS A RECEBER
# ─────────────────────────────────────────────────────────────────────────────

class ReceivablePaymentSerializer(serializers.ModelSerializer):
    receivable = OrganizationScopedPrimaryKeyField(queryset=Receivable.objects.all())
    payment_method = OrganizationScopedPrimaryKeyField(
        queryset=PaymentMethod.objects.all(),
        required=False,
        allow_null=True,
    )
    payment_date = serializers.DateTimeField(required=False)
    value = serializers.DecimalField(max_digits=10, decimal_places=2)

    class Meta:
        model = ReceivablePayment
        fields = [
            'id',
            'receivable',
            'payment_method',
            'payment_date',
            'value',
            'observation',
            'cash_register',
            'created_by',
            'created_at',
        ]
        read_only_fields = ('id', 'cash_register', 'created_by', 'created_at')


class ReceivableSerializer(serializers.ModelSerializer):
    client = OrganizationScopedPrimaryKeyField(queryset=Contact.objects.all())
    order = OrganizationScopedPrimaryKeyField(
        queryset=Order.objects.all(),
        required=False,
        allow_null=True,
    )
    total_value = serializers.DecimalField(max_digits=10, decimal_places=2)
    effective_status = serializers.CharField(read_only=True)
    is_overdue = serializers.BooleanField(read_only=True)
    outstanding_value = serializers.DecimalField(max_digits=10, decimal_places=2, read_only=True)
    payments = ReceivablePaymentSerializer(many=True, read_only=True)
    client_name = serializers.CharField(source='client.name', read_only=True)

    class Meta:
        model = Receivable
        fields = [
            'id',
            'uid',
            'client',
            'client_name',
            'order',
            'description',
            'due_date',
            'total_value',
            'received_value',
            'outstanding_value',
            'status',
            'effective_status',
            'is_overdue',
            'payments',
            'created_at',
        ]
        read_only_fields = ('id', 'uid', 'received_value', 'status', 'created_at')


# ─────────────────────────────────────────────────────────────────────────────
# CAIXA
# ─────────────────────────────────────────────────────────────────────────────

class CashMovementSerializer(serializers.ModelSerializer):
    cash_register = OrganizationScopedPrimaryKeyField(
        queryset=CashRegister.objects.all(),
        required=False,
    )
    payment_method = OrganizationScopedPrimaryKeyField(
        queryset=PaymentMethod.objects.all(),
        required=False,
        allow_null=True,
    )
    value = serializers.DecimalField(max_digits=10, decimal_places=2)
    signed_value = serializers.DecimalField(max_digits=10, decimal_places=2, read_only=True)

    class Meta:
        model = CashMovement
        fields = [
            'id',
            'cash_register',
            'type',
            'value',
            'signed_value',
            'description',
            'payment_method',
            'order',
            'receivable_payment',
            'user',
            'movement_date',
        ]
        read_only_fields = ('id', 'order', 'receivable_payment', 'user', 'movement_date')


class CashRegisterSerializer(serializers.ModelSerializer):
    initial_amount = serializers.DecimalField(max_digits=10, decimal_places=2, required=False)
    balance = serializers.DecimalField(max_digits=10, decimal_places=2, read_only=True)
    reconciliation_difference = serializers.DecimalField(
        max_digits=10, decimal_places=2, read_only=True, allow_null=True
    )
    movements = CashMovementSerializer(many=True, read_only=True)

    class Meta:
        model = CashRegister
        fields = [
            'id',
            'uid',
            'user',
            'status',
            'opening_date',
            'closing_date',
            'initial_amount',
            'final_amount',
            'balance',
            'reconciliation_difference',
            'movements',
        ]
        read_only_fields = (
            'id', 'uid', 'user', 'status', 'opening_date', 'closing_date', 'final_amount',
        )


class CloseCashRegisterSerializer(serializers.Serializer):
    final_amount = serializers.DecimalField(max_digits=10, decimal_places=2)

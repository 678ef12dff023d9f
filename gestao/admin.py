from django.contrib import admin

from .models import (
    Address,
    CashMovement,
    CashRegister,
    Contact,
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
    User,
)


@admin.register(Organization)
class OrganizationAdmin(admin.ModelAdmin):
    list_display = ('name', 'active', 'created_at')
    search_fields = ('name',)


@admin.register(User)
class UserAdmin(admin.ModelAdmin):
    list_display = ('username', 'email', 'organization', 'role', 'is_staff')
    list_filter = ('organization', 'role')


class PhoneInline(admin.TabularInline):
    model = Phone
    extra = 0


class AddressInline(admin.StackedInline):
    model = Address
    extra = 0


@admin.register(Contact)
class ContactAdmin(admin.ModelAdmin):
    list_display = ('name', 'type', 'document', 'organization', 'status')
    list_filter = ('organization', 'type', 'is_delivery_person')
    search_fields = ('name', 'email', 'document')
    inlines = [PhoneInline, AddressInline]


@admin.register(Product)
class ProductAdmin(admin.ModelAdmin):
    list_display = ('internal_code', 'name', 'type', 'current_stock', 'minimum_stock', 'organization')
    list_filter = ('organization', 'type')
    search_fields = ('name', 'internal_code', 'bar_code')


class PriceItemInline(admin.TabularInline):
    model = PriceItem
    extra = 0


@admin.register(PriceTable)
class PriceTableAdmin(admin.ModelAdmin):
    list_display = ('name', 'is_default', 'organization')
    inlines = [PriceItemInline]


@admin.register(PaymentMethod)
class PaymentMethodAdmin(admin.ModelAdmin):
    list_display = ('name', 'type', 'due_days', 'active', 'organization')
    list_filter = ('organization', 'type', 'active')


class OrderItemInline(admin.TabularInline):
    model = OrderItem
    extra = 0
    readonly_fields = ('total_price',)


class OrderPaymentInline(admin.TabularInline):
    model = OrderPayment
    extra = 0
    readonly_fields = ('change',)


@admin.register(Order)
class OrderAdmin(admin.ModelAdmin):
    list_display = ('id', 'client', 'order_date', 'total_value', 'status', 'organization')
    list_filter = ('organization', 'status')
    search_fields = ('client__name',)
    readonly_fields = ('total_value',)
    inlines = [OrderItemInline, OrderPaymentInline]


@admin.register(Receivable)
class ReceivableAdmin(admin.ModelAdmin):
    list_display = ('client', 'due_date', 'total_value', 'received_value', 'status', 'organization')
    list_filter = ('organization', 'status')
    readonly_fields = ('received_value', 'status')


# lançamentos imutáveis: só leitura no admin
class ReadOnlyAdmin(admin.ModelAdmin):

    def has_change_permission(self, request, obj=None):
        return False

    def has_delete_permission(self, request, obj=None):
        return False


@admin.register(ReceivablePayment)
class ReceivablePaymentAdmin(ReadOnlyAdmin):
    list_display = ('receivable', 'value', 'payment_date', 'created_by')

    def has_add_permission(self, request):
        return False


class CashMovementInline(admin.TabularInline):
    model = CashMovement
    extra = 0
    can_delete = False

    def has_add_permission(self, request, obj=None):
        return False

    def has_change_permission(self, request, obj=None):
        return False


@admin.register(CashRegister)
class CashRegisterAdmin(admin.ModelAdmin):
    list_display = ('id', 'organization', 'user', 'status', 'opening_date', 'closing_date')
    list_filter = ('organization', 'status')
    readonly_fields = ('status', 'opening_date', 'closing_date', 'final_amount')
    inlines = [CashMovementInline]


@admin.register(CashMovement)
class CashMovementAdmin(ReadOnlyAdmin):
    list_display = ('cash_register', 'type', 'value', 'description', 'movement_date')
    list_filter = ('type',)

    def has_add_permission(self, request):
        return False

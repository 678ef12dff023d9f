from rest_framework.routers import DefaultRouter

from .api import (
    CashMovementViewSet,
    CashRegisterViewSet,
    ContactViewSet,
    OrderViewSet,
    OrganizationViewSet,
    PaymentMethodViewSet,
    PriceTableViewSet,
    ProductViewSet,
    ReceivablePaymentViewSet,
    ReceivableViewSet,
)

router = DefaultRouter()
router.register(r'organization', OrganizationViewSet, basename='organization')
router.register(r'contacts', ContactViewSet, basename='contacts')
router.register(r'products', ProductViewSet, basename='products')
router.register(r'price-tables', PriceTableViewSet, basename='price-tables')
router.register(r'payment-methods', PaymentMethodViewSet, basename='payment-methods')
router.register(r'orders', OrderViewSet, basename='orders')
router.register(r'receivables', ReceivableViewSet, basename='receivables')
router.register(r'receivable-payments', ReceivablePaymentViewSet, basename='receivable-payments')
router.register(r'cash-registers', CashRegisterViewSet, basename='cash-registers')
router.register(r'cash-movements', CashMovementViewSet, basename='cash-movements')

urlpatterns = router.urls

import random
from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction
from faker import Faker

from gestao.models import (
    Address,
    Contact,
    Organization,
    PaymentMethod,
    Phone,
    PriceItem,
    PriceTable,
    Product,
    User,
)

PAYMENT_METHODS = [
    ('Dinheiro', PaymentMethod.MethodType.CASH, 0),
    ('PIX', PaymentMethod.MethodType.PIX, 0),
    ('Cartão de Débito', PaymentMethod.MethodType.DEBIT_CARD, 0),
    ('Cartão de Crédito', PaymentMethod.MethodType.CREDIT_CARD, 0),
    ('Fiado 30 dias', PaymentMethod.MethodType.RECEIVABLE, 30),
]

# nome, custo, preço de venda
PRODUCTS = [
    ('Água Mineral 20L', Decimal('6.00'), Decimal('12.00')),
    ('Gás P13', Decimal('85.00'), Decimal('110.00')),
    ('Água Mineral 500ml', Decimal('0.80'), Decimal('2.00')),
    ('Água com Gás 500ml', Decimal('1.10'), Decimal('2.50')),
    ('Galão 20L (vasilhame)', Decimal('15.00'), Decimal('25.00')),
]


class Command(BaseCommand):
    help = "Cria uma organização de demonstração com clientes, produtos e formas de pagamento"

    def add_arguments(self, parser):
        parser.add_argument('--organization', default='Distribuidora Demo')
        parser.add_argument('--clients', type=int, default=10)
        parser.add_argument('--seed', type=int, default=None)

    @transaction.atomic
    def handle(self, *args, **options):
        fake = Faker('pt_BR')
        rng = random.Random(options['seed'])
        if options['seed'] is not None:
            Faker.seed(options['seed'])

        organization, created = Organization.objects.get_or_create(name=options['organization'])
        if not created:
            self.stdout.write(self.style.WARNING(f"Organização '{organization.name}' já existe; completando dados"))

        user, user_created = User.objects.get_or_create(
            username=f'admin-{organization.pk}',
            defaults={'organization': organization, 'role': 'admin', 'email': fake.email()},
        )
        if user_created:
            user.set_password('demo')
            user.save()

        for name, method_type, due_days in PAYMENT_METHODS:
            PaymentMethod.objects.get_or_create(
                organization=organization,
                name=name,
                defaults={'type': method_type, 'due_days': due_days},
            )

        table, _ = PriceTable.objects.get_or_create(
            organization=organization,
            name='Tabela Padrão',
            defaults={'is_default': True},
        )

        for index, (name, cost, price) in enumerate(PRODUCTS, start=1):
            product, _ = Product.objects.get_or_create(
                organization=organization,
                internal_code=f'{index:04d}',
                defaults={
                    'name': name,
                    'cost_value': cost,
                    'bar_code': self.generate_ean13('789' + str(rng.randint(100000000, 999999999))),
                    'current_stock': rng.randint(20, 200),
                    'minimum_stock': 10,
                },
            )
            PriceItem.objects.update_or_create(
                price_table=table,
                product=product,
                defaults={'price': price},
            )

        for _ in range(options['clients']):
            client = Contact.objects.create(
                organization=organization,
                name=fake.name(),
                type=Contact.ContactType.CLIENT,
                email=fake.email(),
                document=''.join(filter(str.isdigit, fake.cpf())),
            )
            Phone.objects.create(contact=client, number=fake.phone_number(), is_primary=True)
            Address.objects.create(
                contact=client,
                zip_code=fake.postcode(),
                street=fake.street_name(),
                number=fake.building_number(),
                neighborhood=fake.bairro(),
                city=fake.city(),
                state=fake.estado_sigla(),
                is_primary=True,
            )

        Contact.objects.get_or_create(
            organization=organization,
            name='Entregador Demo',
            defaults={'type': Contact.ContactType.EMPLOYEE, 'is_delivery_person': True},
        )

        self.stdout.write(self.style.SUCCESS(
            f"Organização '{organization.name}' pronta: {options['clients']} clientes, "
            f"{len(PRODUCTS)} produtos, usuário {user.username}"
        ))

    def generate_ean13(self, base):
        base = base[:12]
        total = 0
        for i, digit in enumerate(base):
            digit = int(digit)
            total += digit if i % 2 == 0 else digit * 3

        remainder = total % 10
        check = 0 if remainder == 0 else 10 - remainder

        return base + str(check)

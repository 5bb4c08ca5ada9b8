from decimal import Decimal

from catalog.models import Product
from factory import Faker
from factory.django import DjangoModelFactory


class ProductFactory(DjangoModelFactory):
    class Meta:
        model = Product

    name = Faker("sentence", nb_words=3)
    description = Faker("paragraph")
    price = Decimal("10.00")
    category = Faker("word")
    stock = 10
    image_url = Faker("image_url")

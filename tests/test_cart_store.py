import json
from decimal import Decimal

from storefront.application.cart_store import CART_KEY, CartStore
from storefront.domain.cart import CartLine, calculate_total_price, map_cart_to_order_items
from storefront.domain.schemas import ProductRead
from storefront.infrastructure.storage import MemoryKeyValueStore


def _product(pid=1, name="Shirt", price="20.00"):
    return ProductRead(id=pid, name=name, price=Decimal(price))


def test_total_is_sum_of_quantity_times_price():
    cart = [
        CartLine(product_id=1, name="Shirt", price=Decimal("20.00"), quantity=2),
        CartLine(product_id=2, name="Hat", price=Decimal("5.25"), quantity=3),
        CartLine(product_id=3, name="Sock", price=Decimal("0.10"), quantity=1),
    ]
    assert calculate_total_price(cart) == Decimal("55.85")
    assert calculate_total_price([]) == Decimal("0")


def test_order_items_mirror_cart_lines():
    cart = [CartLine(product_id=4, name="Mug", price=Decimal("7.00"), quantity=3)]
    (item,) = map_cart_to_order_items(cart)
    assert (item.product_id, item.product_name, item.quantity, item.unit_price) == (4, "Mug", 3, Decimal("7.00"))


def test_adding_same_product_twice_merges_into_one_line():
    cart = CartStore(MemoryKeyValueStore())
    cart.add_to_cart(_product())
    cart.add_to_cart(_product())
    assert len(cart) == 1
    assert cart.lines[0].quantity == 2


def test_adding_different_products_appends_in_order():
    cart = CartStore(MemoryKeyValueStore())
    cart.add_to_cart(_product(1, "Shirt"))
    cart.add_to_cart(_product(2, "Hat", "5.00"))
    assert [line.name for line in cart.lines] == ["Shirt", "Hat"]
    assert all(line.quantity == 1 for line in cart.lines)


def test_remove_is_idempotent():
    cart = CartStore(MemoryKeyValueStore())
    cart.add_to_cart(_product(1))
    cart.add_to_cart(_product(2, "Hat"))
    cart.remove_from_cart(1)
    cart.remove_from_cart(1)
    assert [line.product_id for line in cart.lines] == [2]


def test_set_quantity_accepts_values_outside_the_picker(caplog):
    cart = CartStore(MemoryKeyValueStore())
    cart.add_to_cart(_product())
    cart.set_quantity(1, 4)
    assert cart.lines[0].quantity == 4

    cart.set_quantity(1, 0)
    assert cart.lines[0].quantity == 0
    assert "outside 1..5" in caplog.text


def test_set_quantity_for_unknown_product_is_ignored():
    storage = MemoryKeyValueStore()
    cart = CartStore(storage)
    cart.set_quantity(99, 2)
    assert cart.is_empty
    assert storage.get(CART_KEY) is None


def test_every_mutation_is_persisted_and_reloaded():
    storage = MemoryKeyValueStore()
    cart = CartStore(storage)
    cart.add_to_cart(_product())
    cart.add_to_cart(_product())
    cart.add_to_cart(_product(2, "Hat", "5.50"))
    cart.set_quantity(2, 3)

    restored = CartStore(storage)
    assert [(l.product_id, l.quantity) for l in restored.lines] == [(1, 2), (2, 3)]
    assert restored.total_price() == Decimal("56.50")

    stored = json.loads(storage.get(CART_KEY))
    assert stored[1]["price"] == "5.50"


def test_unparsable_storage_starts_empty():
    assert CartStore(MemoryKeyValueStore({CART_KEY: "{not json"})).is_empty
    assert CartStore(MemoryKeyValueStore({CART_KEY: json.dumps([{"name": "no id"}])})).is_empty


def test_clear_empties_storage_too():
    storage = MemoryKeyValueStore()
    cart = CartStore(storage)
    cart.add_to_cart(_product())
    cart.clear()
    assert CartStore(storage).is_empty


def test_lines_are_copies():
    cart = CartStore(MemoryKeyValueStore())
    cart.add_to_cart(_product())
    cart.lines[0].quantity = 50
    assert cart.lines[0].quantity == 1

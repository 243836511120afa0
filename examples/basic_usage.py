#!/usr/bin/env python3
"""Basic usage example for recblock.

This example demonstrates:
1. Declaring a record type
2. Encoding to its exact byte layout
3. Decoding back, fail-fast and attempt style
4. Tagged variants and a delimited list
"""

from __future__ import annotations

import datetime

from recblock import (
    DecodeError,
    Record,
    encoded_size,
    field_sizes,
    has_bit_field,
    has_list_of,
    has_one,
)


class Header(Record):
    """Order header, tagged 'H'."""

    rtype = has_one("string", length=1, key="H")
    order_no = has_one("packed", length=8)
    placed = has_one("time")
    status = has_bit_field("uint8", [("paid", 1), ("shipped", 1), ("priority", 3)])


class LineItem(Record):
    """One product line, tagged 'L'."""

    rtype = has_one("string", length=1, key="L")
    sku = has_one("sstring", length=12)
    quantity = has_one("uint16")
    price_cents = has_one("int32")


class Discount(Record):
    """A discount line, tagged 'X'."""

    rtype = has_one("string", length=1, key="X")
    code = has_one("sstring", length=12)
    units = has_one("uint16")
    amount_cents = has_one("int32")


class Order(Record):
    """Header, any number of lines, and a total."""

    header = has_one(Header)
    lines = has_list_of([LineItem, Discount])
    total_cents = has_one("int32")


def main() -> None:
    """Run the basic usage example."""
    print("=" * 60)
    print("recblock Basic Usage Example")
    print("=" * 60)
    print()

    print("1. Building an order...")
    order = Order()
    order.header.order_no = 20240301
    order.header.placed = datetime.datetime(2024, 3, 1, 14, 5, 0)
    order.header.status.paid = 1
    order.header.status.priority = 5
    order.lines.append(LineItem(sku="WIDGET-01", quantity=3, price_cents=499))
    order.lines.append(LineItem(sku="GADGET-7", quantity=1, price_cents=1299))
    order.lines.append(Discount(code="SPRING", units=1, amount_cents=-200))
    order.total_cents = 3 * 499 + 1299 - 200
    print(f"   {order.header!r}")
    print(f"   {len(order.lines)} lines, total {order.total_cents} cents")
    print()

    print("2. Encoding...")
    data = order.to_bytes()
    print(f"   Encoded size: {len(data)} bytes")
    print(f"   Header size: {encoded_size(Header)} bytes (fixed)")
    print(f"   Field sizes: {field_sizes(order)}")
    print(f"   Hex: {data.hex()}")
    print()

    print("3. Decoding...")
    decoded = Order(data)
    for line in decoded.lines:
        print(f"   {type(line).__name__}: {line.to_dict()}")
    print(f"   Round trip matches: {decoded == order}")
    print()

    print("4. Handling bad data...")
    corrupt = b"Z" + data[1:]
    try:
        Order(corrupt)
    except DecodeError as e:
        print(f"   Fail-fast decode raised: {e}")
    print(f"   Attempt decode returned: {Order().try_decode(corrupt)}")
    print()

    print("=" * 60)
    print("Example complete!")
    print("=" * 60)


if __name__ == "__main__":
    main()

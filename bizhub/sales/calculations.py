"""
Money arithmetic for carts and sales

All amounts are Decimals rounded half-up to 2 places.
"""
from decimal import Decimal, ROUND_HALF_UP

ZERO = Decimal('0.00')
CENT = Decimal('0.01')
HUNDRED = Decimal('100')


def money(value):
    return Decimal(str(value or 0)).quantize(CENT, rounding=ROUND_HALF_UP)


def line_total(selling_price, quantity, discount=ZERO, tax=ZERO):
    """selling price x quantity - discount + tax"""
    return money(money(selling_price) * quantity - money(discount) + money(tax))


def compute_totals(lines, amount_paid=None):
    """
    Totals for a list of line dicts with keys
    selling_price, quantity, cost_price, discount, tax.

    amount_paid defaults to the grand total (a fully paid sale).
    """
    subtotal = ZERO
    total_discount = ZERO
    total_tax = ZERO
    total_cost = ZERO
    for line in lines:
        quantity = line['quantity']
        subtotal += money(line['selling_price']) * quantity
        total_discount += money(line.get('discount'))
        total_tax += money(line.get('tax'))
        total_cost += money(line.get('cost_price')) * quantity

    subtotal = money(subtotal)
    total_discount = money(total_discount)
    total_tax = money(total_tax)
    total_cost = money(total_cost)
    grand_total = money(subtotal - total_discount + total_tax)
    profit = money(grand_total - total_cost)
    profit_margin = money(profit / grand_total * HUNDRED) if grand_total else ZERO

    paid = grand_total if amount_paid is None else money(amount_paid)
    return {
        'subtotal': subtotal,
        'total_discount': total_discount,
        'total_tax': total_tax,
        'grand_total': grand_total,
        'total_cost': total_cost,
        'profit': profit,
        'profit_margin': profit_margin,
        'amount_paid': paid,
        'amount_due': amount_due(grand_total, paid),
        'payment_status': payment_status_for(paid, grand_total),
    }


def amount_due(grand_total, amount_paid):
    return max(ZERO, money(grand_total) - money(amount_paid))


def payment_status_for(amount_paid, grand_total):
    """pending when nothing is paid, partial while something is still owed, otherwise paid"""
    amount_paid = money(amount_paid)
    if amount_paid == ZERO:
        return 'pending'
    if amount_paid < money(grand_total):
        return 'partial'
    return 'paid'

from conftest import tx

from reconciler.dedup import key_set, transaction_key


def test_key_combines_date_amount_and_description():
    assert transaction_key(tx()) == "2024-01-15|1000.00|ach deposit ppd hycite"


def test_key_ignores_category_and_source():
    first = tx(type="ach deposit", source="HYCITE")
    second = tx(type="Other", source="Hycite Inc")
    assert transaction_key(first) == transaction_key(second)


def test_key_rounds_amount_to_cents():
    assert transaction_key(tx(amount=1000)) == transaction_key(tx(amount=1000.001))
    assert transaction_key(tx(amount=1000.0)) != transaction_key(tx(amount=1000.1))


def test_key_distinguishes_dates():
    assert transaction_key(tx(date="2024-01-15")) != transaction_key(tx(date="2024-01-16"))


def test_key_set_collapses_equivalent_descriptions():
    keys = key_set([tx(), tx(description="ach deposit ppd hycite!!"), tx(amount=5.0)])
    assert len(keys) == 2

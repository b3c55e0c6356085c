from shopmuse.utils.money import first_number, format_inr, rupees


def test_indian_grouping():
    assert format_inr(100) == "100"
    assert format_inr(24999) == "24,999"
    assert format_inr(123456.5) == "1,23,456.5"
    assert format_inr(1234567) == "12,34,567"
    assert format_inr(-4999.25) == "-4,999.25"


def test_rupees():
    assert rupees(45999) == "₹45,999"


def test_first_number():
    assert first_number("find wireless headphones under 5000") == 5000
    assert first_number("between 500 and 1500") == 500
    assert first_number("no digits") is None
    assert first_number("") is None

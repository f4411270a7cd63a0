import pytest

from mioto.contact import whatsapp_link


@pytest.mark.parametrize(
    "phone, expected",
    [
        ("(11) 99999-9999", "https://wa.me/5511999999999"),
        ("11 3456 7890", "https://wa.me/551134567890"),
        (None, None),
        ("", None),
        ("sem telefone", None),
    ],
)
def test_whatsapp_link(phone, expected):
    assert whatsapp_link(phone) == expected

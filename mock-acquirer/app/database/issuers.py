"""Issuer directory and consumer data for mock acquirer"""

from idx import IDINAttribute

# Country name -> (BIC, name), in display order
ISSUERS: dict[str, list[tuple[str, str]]] = {
    "Nederland": [
        ("ABNANL2A", "ABN AMRO"),
        ("INGBNL2A", "ING"),
        ("RABONL2U", "Rabobank"),
        ("SNSBNL2A", "SNS"),
    ],
    "België/Belgique": [
        ("GEBABEBB", "BNP Paribas Fortis"),
    ],
}

CONSUMER_NAME = "J. de Vries"
CONSUMER_IBAN = "NL44RABO0123456789"

ATTRIBUTE_PREFIX = "urn:nl:bvn:bankid:1.0:consumer."

# Attributes returned for each requested iDIN flag
CONSUMER_ATTRIBUTES: dict[IDINAttribute, dict[str, str]] = {
    IDINAttribute.BIN: {
        ATTRIBUTE_PREFIX + "bin": "NL-BIN-0123456789",
    },
    IDINAttribute.NAME: {
        ATTRIBUTE_PREFIX + "legallastname": "Vries",
        ATTRIBUTE_PREFIX + "preferredlastname": "Vries",
        ATTRIBUTE_PREFIX + "partnerlastname": "",
        ATTRIBUTE_PREFIX + "legallastnameprefix": "de",
        ATTRIBUTE_PREFIX + "initials": "J",
    },
    IDINAttribute.ADDRESS: {
        ATTRIBUTE_PREFIX + "street": "Dorpsstraat",
        ATTRIBUTE_PREFIX + "houseno": "1",
        ATTRIBUTE_PREFIX + "postalcode": "1234AB",
        ATTRIBUTE_PREFIX + "city": "Amsterdam",
        ATTRIBUTE_PREFIX + "country": "NL",
    },
    IDINAttribute.DATE_OF_BIRTH: {
        ATTRIBUTE_PREFIX + "dateofbirth": "19800101",
        ATTRIBUTE_PREFIX + "18orolder": "true",
    },
    IDINAttribute.GENDER: {
        ATTRIBUTE_PREFIX + "gender": "1",
    },
    IDINAttribute.TELEPHONE: {
        ATTRIBUTE_PREFIX + "telephone": "+31201234567",
    },
    IDINAttribute.EMAIL: {
        ATTRIBUTE_PREFIX + "email": "j.devries@example.nl",
    },
}


def issuer_ids() -> set[str]:
    return {bic for issuers in ISSUERS.values() for bic, _ in issuers}


def consumer_attributes(requested: int) -> dict[str, str]:
    """Attributes for a requested bitmask"""
    attributes: dict[str, str] = {}
    for flag, values in CONSUMER_ATTRIBUTES.items():
        if requested & int(flag) == int(flag):
            attributes.update(values)
    return attributes

import pytest

from auctionhouse.errors import (
    FailedPrecondition,
    InternalError,
    InvalidArgument,
    NotFound,
    ServiceError,
    StatusCode,
)


@pytest.mark.parametrize(
    "cls, code",
    [
        (InvalidArgument, StatusCode.INVALID_ARGUMENT),
        (NotFound, StatusCode.NOT_FOUND),
        (FailedPrecondition, StatusCode.FAILED_PRECONDITION),
        (InternalError, StatusCode.INTERNAL),
    ],
)
def test_subclass_codes(cls, code):
    err = cls("boom")
    assert err.code is code
    assert isinstance(err, ServiceError)


def test_message_is_kept():
    err = NotFound("Subasta no encontrada")
    assert err.message == "Subasta no encontrada"
    assert str(err) == "Subasta no encontrada"


def test_wire_values_of_codes():
    assert int(InvalidArgument("id inválido").code) == 3
    assert int(NotFound("Subasta no encontrada").code) == 5


def test_caught_as_base_class():
    err = FailedPrecondition("La subasta ha terminado")
    with pytest.raises(ServiceError, match="La subasta ha terminado"):
        raise err
    assert err.code is StatusCode.FAILED_PRECONDITION
    assert err.message == "La subasta ha terminado"


def test_repr_names_code():
    text = repr(InternalError("DB error: x"))
    assert "INTERNAL" in text
    assert "DB error: x" in text
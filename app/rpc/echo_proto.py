"""Echo service contract, built from a descriptor at import time.

Mirrors:

    service EchoService {
      rpc Say(SayRequest) returns (SayResponse);
      rpc StreamCount(CountRequest) returns (stream CountTick);
    }
"""

from __future__ import annotations

from google.protobuf import descriptor_pb2, descriptor_pool, message_factory

PACKAGE = "proto"

_F = descriptor_pb2.FieldDescriptorProto


def _file_descriptor() -> descriptor_pb2.FileDescriptorProto:
    fd = descriptor_pb2.FileDescriptorProto(name="triggerhub/echo.proto", package=PACKAGE, syntax="proto3")

    def message(name: str, *fields: tuple[str, int, int]) -> None:
        m = fd.message_type.add(name=name)
        for fname, number, ftype in fields:
            m.field.add(name=fname, number=number, type=ftype, label=_F.LABEL_OPTIONAL)

    message("SayRequest", ("msg", 1, _F.TYPE_STRING))
    message("SayResponse", ("msg", 1, _F.TYPE_STRING))
    message("CountRequest", ("from", 1, _F.TYPE_INT32), ("to", 2, _F.TYPE_INT32))
    message("CountTick", ("value", 1, _F.TYPE_INT32))

    svc = fd.service.add(name="EchoService")
    svc.method.add(name="Say", input_type=f".{PACKAGE}.SayRequest", output_type=f".{PACKAGE}.SayResponse")
    svc.method.add(
        name="StreamCount",
        input_type=f".{PACKAGE}.CountRequest",
        output_type=f".{PACKAGE}.CountTick",
        server_streaming=True,
    )
    return fd


_pool = descriptor_pool.DescriptorPool()
_pool.AddSerializedFile(_file_descriptor().SerializeToString())


def _cls(name: str):
    return message_factory.GetMessageClass(_pool.FindMessageTypeByName(f"{PACKAGE}.{name}"))


SayRequest = _cls("SayRequest")
SayResponse = _cls("SayResponse")
CountRequest = _cls("CountRequest")
CountTick = _cls("CountTick")


def method_path(service: str, method: str) -> str:
    return f"/{service}/{method}"


def count_request(frm: int, to: int):
    # "from" is a keyword
    return CountRequest(**{"from": frm, "to": to})


def count_bounds(req) -> tuple[int, int]:
    return getattr(req, "from"), req.to

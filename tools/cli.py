#!/usr/bin/env python3
# =============================================================================
# CLI Tool for the Lambda Event Adapter
# =============================================================================
# Developer tooling for checking how events are normalized and encoded,
# locally or against a deployed function.
#
# Usage:
#   python tools/cli.py normalize --file event.json --type sqs
#   python tools/cli.py normalize --json '{"httpMethod": "GET", "body": "hi"}'
#   python tools/cli.py roundtrip --file apigw.json --body '"done"' --status 201
#   python tools/cli.py invoke --function-name my-fn --file event.json
# =============================================================================

import argparse
import base64
import json
import sys
import os
from typing import Any, Dict

import boto3
from botocore.exceptions import ClientError

# Add project root to path
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from aws_lambda_powertools.utilities.data_classes.common import DictWrapper

from src.event_adapter.encode import encode
from src.event_adapter.errors import EventAdapterError
from src.event_adapter.events import EventFamily
from src.event_adapter.message import Message
from src.event_adapter.normalize import normalize

INPUT_TYPES: Dict[str, Any] = {
    "sqs": EventFamily.QUEUE_MESSAGE_BATCH.event_class,
    "sns": EventFamily.NOTIFICATION_BATCH.event_class,
    "kinesis": EventFamily.STREAM_RECORD_BATCH.event_class,
    "s3": EventFamily.OBJECT_STORAGE_EVENT.event_class,
    "apigw": EventFamily.GATEWAY_REQUEST_V1.event_class,
    "apigw-v2": EventFamily.GATEWAY_REQUEST_V2.event_class,
    "map": Dict[str, Any],
}


def _load_payload(args) -> bytes:
    if args.file:
        with open(args.file, "rb") as f:
            return f.read()
    if args.json:
        return args.json.encode("utf-8")
    raise SystemExit("Provide --file or --json")


def _parse_headers(pairs) -> Dict[str, str]:
    headers = {}
    for pair in pairs or []:
        key, _, value = pair.partition("=")
        headers[key] = value
    return headers


def _printable(value: Any) -> Any:
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("utf-8", errors="replace")
    if isinstance(value, DictWrapper):
        return {"type": type(value).__name__, "event": value.raw_event}
    return value


def _describe(message: Message) -> Dict[str, Any]:
    return {
        "payloadType": type(message.payload).__name__,
        "payload": _printable(message.payload),
        "headers": {key: _printable(value) for key, value in message.headers.items()},
    }


def _output(result: Any, pretty: bool) -> None:
    if pretty:
        print(json.dumps(result, indent=2, ensure_ascii=False, default=str))
    else:
        print(json.dumps(result, ensure_ascii=False, default=str))


def cmd_normalize(args) -> Any:
    message = normalize(_load_payload(args), _parse_headers(args.header), INPUT_TYPES.get(args.type))
    return _describe(message)


def cmd_roundtrip(args) -> Any:
    request = normalize(_load_payload(args), _parse_headers(args.header), INPUT_TYPES.get(args.type))
    response = None
    if args.body is not None:
        headers = _parse_headers(args.response_header)
        if args.status is not None:
            headers["statusCode"] = args.status
        response = Message(payload=args.body.encode("utf-8"), headers=headers)
    output = encode(request, response)
    return {
        "request": _describe(request),
        "output": output.decode("utf-8", errors="replace"),
    }


def cmd_invoke(args) -> Any:
    client = boto3.client("lambda", region_name=args.region)
    result = client.invoke(
        FunctionName=args.function_name,
        InvocationType="RequestResponse",
        LogType="Tail" if args.logs else "None",
        Payload=_load_payload(args),
    )
    body = result["Payload"].read()
    output = {
        "statusCode": result.get("StatusCode"),
        "functionError": result.get("FunctionError"),
        "payload": body.decode("utf-8", errors="replace"),
    }
    if args.logs and result.get("LogResult"):
        output["logs"] = base64.b64decode(result["LogResult"]).decode("utf-8", errors="replace")
    return output


def main():
    parser = argparse.ArgumentParser(
        description="Lambda event adapter CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--pretty", "-p", action="store_true", help="Pretty print output")
    sub = parser.add_subparsers(dest="command", required=True)

    def add_input(p):
        p.add_argument("--json", "-j", help="Event payload as JSON text")
        p.add_argument("--file", "-f", help="File to load the event payload from")
        p.add_argument("--type", "-t", choices=sorted(INPUT_TYPES), help="Declared input type")
        p.add_argument("--header", "-H", action="append", help="Transport header key=value")

    p_norm = sub.add_parser("normalize", help="Show the normalized Message for an event")
    add_input(p_norm)
    p_norm.set_defaults(func=cmd_normalize)

    p_round = sub.add_parser("roundtrip", help="Normalize an event and encode a response for it")
    add_input(p_round)
    p_round.add_argument("--body", help="Response payload text (omit for no response)")
    p_round.add_argument("--status", type=int, help="Response statusCode header")
    p_round.add_argument("--response-header", "-R", action="append", help="Response header key=value")
    p_round.set_defaults(func=cmd_roundtrip)

    p_invoke = sub.add_parser("invoke", help="Invoke a deployed function with an event")
    p_invoke.add_argument("--json", "-j", help="Event payload as JSON text")
    p_invoke.add_argument("--file", "-f", help="File to load the event payload from")
    p_invoke.add_argument("--function-name", "-n", required=True, help="Function name or ARN")
    p_invoke.add_argument("--region", "-r", default=os.environ.get("AWS_REGION", "us-east-1"), help="AWS region")
    p_invoke.add_argument("--logs", action="store_true", help="Include the tail of the execution log")
    p_invoke.set_defaults(func=cmd_invoke)

    args = parser.parse_args()

    try:
        result = args.func(args)
    except EventAdapterError as e:
        _output({"error": type(e).__name__, "message": str(e)}, args.pretty)
        sys.exit(1)
    except ClientError as e:
        _output({"error": e.response["Error"]["Code"], "message": e.response["Error"]["Message"]}, args.pretty)
        sys.exit(1)

    _output(result, args.pretty)


if __name__ == "__main__":
    main()

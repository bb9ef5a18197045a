"""Posting a pre-serialized XML payload and reading an XML response."""

import logging

from apicaller import APIClient, ResultKind
from apicaller.logging import DefaultLogger

ORDER = """<order>
  <item sku="A-100">2</item>
  <item sku="B-200">1</item>
</order>"""


def main():
    client = APIClient(
        url="https://api.example.com",
        method="POST",
        response_format="xml",
        logger=DefaultLogger(level=logging.DEBUG),
    )
    client.set_default("api_key", "demo")

    with client:
        outcome = client.dispatch("/orders", ORDER, "xml")

    if outcome.kind is ResultKind.TRANSPORT_ERROR:
        print(f"Could not reach the API: {outcome.error}")
    elif outcome.kind is ResultKind.PARSE_ERROR:
        print(f"Unexpected response: {outcome.error}")
        print(client.get_last_call().raw_response)
    else:
        print(outcome.value)


if __name__ == "__main__":
    main()

from __future__ import annotations

import json
from dataclasses import dataclass
from enum import Enum

import requests
from loguru import logger


class KeyAvailability(Enum):
    AVAILABLE = 'available'
    TAKEN = 'taken'
    UNKNOWN = 'unknown'


@dataclass(frozen=True)
class AvailabilityResult:
    """Outcome of a key check. `body` holds the raw response for UNKNOWN results."""

    availability: KeyAvailability
    body: str = ''


@dataclass(frozen=True)
class CreationOutcome:
    success: bool
    status_code: int
    body: str = ''


class Longbow:
    """Handles everything related to the Longbow labels API."""

    def __init__(
        self,
        url: str,
        tenant_id: str,
        api_key: str,
        timeout: float = 30,
        session: requests.Session | None = None,
    ) -> None:
        """
        Initializes the client with the tenant credentials.

        The headers are built once and sent with every request. A custom `session` can be passed in, otherwise a new
        `requests.Session` is created.

        Args:
            url (str): The base URL of the regional API endpoint, without trailing '/'.
            tenant_id (str): The tenant which owns the labels.
            api_key (str): The API key used to authenticate against the tenant.
            timeout (float, optional): Seconds to wait for the API before giving up. Defaults to 30.
            session (requests.Session, optional): The session used to send requests. Defaults to None.

        Returns:
            None
        """

        self.url = url
        logger.debug(f'url = {self.url}')
        self.labels_url = url + '/v1/labels'
        self.name_valid_url = self.labels_url + '/name-valid'
        logger.debug(f'tenant_id = {tenant_id}')
        self.timeout = timeout

        self.headers = {
            'X-Alta-Tenant': tenant_id,
            'Content-Type': 'application/json',
            'X-API-KEY': api_key,
        }

        self.session = session if session is not None else requests.Session()

    def check_key_available(self, key: str) -> AvailabilityResult:
        """
        Checks if a label key is still unused for the tenant.

        The API answers with a bare `true` if the key can be used and `false` if it already exists. Anything else is
        returned as UNKNOWN together with the raw body so it can be shown to the user.

        Args:
            key (str): The label key to check.

        Returns:
            AvailabilityResult: The parsed answer of the API.

        Raises:
            LongbowConnectionError: If the request could not be sent or timed out.
        """

        logger.debug(f'Checking key "{key}" against {self.name_valid_url}')

        try:
            response = self.session.get(
                self.name_valid_url,
                headers=self.headers,
                params={'key': key},
                timeout=self.timeout,
            )
        except requests.RequestException as e:
            raise LongbowConnectionError(f'Could not check key "{key}": {e}') from e

        body = response.text
        logger.debug(f'Key check for "{key}" returned {response.status_code}: {body}')

        answer = body.strip()
        if answer == 'true':
            return AvailabilityResult(KeyAvailability.AVAILABLE)
        elif answer == 'false':
            return AvailabilityResult(KeyAvailability.TAKEN)
        else:
            return AvailabilityResult(KeyAvailability.UNKNOWN, body)

    def create_label(self, payload: dict) -> CreationOutcome:
        """
        Creates a new label with its values.

        Args:
            payload (dict): The label definition, see `labels.build_payload()`.

        Returns:
            CreationOutcome: Successful for HTTP 200 and 201, failed with status and body otherwise.

        Raises:
            LongbowConnectionError: If the request could not be sent or timed out.
        """

        data = json.dumps(payload)
        logger.debug(f'Using payload: {data}')

        try:
            response = self.session.post(self.labels_url, headers=self.headers, data=data, timeout=self.timeout)
        except requests.RequestException as e:
            raise LongbowConnectionError(f'Could not create label "{payload.get("key")}": {e}') from e

        logger.debug(f'Label creation returned {response.status_code}: {response.text}')

        return CreationOutcome(response.status_code in (200, 201), response.status_code, response.text)


class LongbowError(Exception):
    """Base error class which inherits from Exception."""

    pass


class LongbowConnectionError(LongbowError):
    """Raised if the API could not be reached."""

    pass

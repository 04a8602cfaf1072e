import logging

import requests
from pydantic import ValidationError

import config
from schemas import (
    CustomerListResponse,
    ProductListResponse,
    ProductResponse,
    SaleConfirmation,
)

logger = logging.getLogger(__name__)


class ApiError(Exception):
    """Backend request failed (network, HTTP status or non-JSON body)."""

    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.status_code = status_code


class ApiResponseError(ApiError):
    """Backend answered, but the body is not what the endpoint promises."""


class BackendClient:
    """Blocking client for the store REST API. No retries: a failed call
    raises and the caller decides whether to try again.
    """

    def __init__(self, base_url=None, token=None, timeout=None, session=None):
        self.base_url = (base_url or config.API_BASE_URL).rstrip('/')
        self.timeout = timeout if timeout is not None else config.REQUEST_TIMEOUT
        self.session = session or requests.Session()
        self.session.headers.update({'Accept': 'application/json'})
        token = token if token is not None else config.API_TOKEN
        if token:
            self.session.headers['Authorization'] = f"Bearer {token}"

    def request(self, method, path, params=None, json_payload=None):
        url = f"{self.base_url}/{path.lstrip('/')}"
        headers = {}
        if method.upper() in {'POST', 'PUT', 'PATCH'}:
            headers['Content-Type'] = 'application/json'
        if params:
            params = {k: v for k, v in params.items() if v not in (None, '')}
        try:
            response = self.session.request(
                method=method,
                url=url,
                headers=headers,
                params=params,
                json=json_payload,
                timeout=self.timeout,
            )
        except requests.exceptions.RequestException as exc:
            logger.error("Request to %s failed: %s", url, exc)
            raise ApiError(f"Request to {url} failed: {exc}") from exc

        if not 200 <= response.status_code < 300:
            logger.error("API returned %s for %s %s", response.status_code, method, url)
            raise ApiError(f"HTTP error! status: {response.status_code}", status_code=response.status_code)
        try:
            return response.json()
        except ValueError as exc:
            raise ApiResponseError(f"Invalid JSON received from {url}: {exc}",
                                   status_code=response.status_code) from exc

    @staticmethod
    def _parse(model, body):
        try:
            parsed = model.model_validate(body)
        except ValidationError as exc:
            logger.error("Unexpected %s body: %s", model.__name__, exc)
            raise ApiResponseError(f"Unexpected response shape for {model.__name__}: {exc}") from exc
        if not parsed.success:
            message = body.get('message') if isinstance(body, dict) else None
            raise ApiResponseError(message or f"{model.__name__} reported success=false")
        return parsed

    def list_products(self, page=1, limit=20, search=None, category=None):
        body = self.request('GET', '/products', params={
            'page': page, 'limit': limit, 'search': search, 'category': category,
        })
        return self._parse(ProductListResponse, body).data

    def get_product(self, product_id):
        body = self.request('GET', f'/products/{product_id}')
        return self._parse(ProductResponse, body).data

    def list_customers(self, page=1, limit=20, search=None):
        body = self.request('GET', '/customers', params={'page': page, 'limit': limit, 'search': search})
        return self._parse(CustomerListResponse, body).data

    def create_sale(self, payload):
        body = self.request('POST', '/sales', json_payload=payload.to_wire())
        return self._parse(SaleConfirmation, body)

"""HTTP transport used by the armkit request pipeline."""

from armkit.http.transport import HttpTransport, RequestRecord, sanitize_headers

__all__ = ["HttpTransport", "RequestRecord", "sanitize_headers"]

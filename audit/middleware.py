# audit/middleware.py
import ipaddress

# 우선순위 순서 (프록시/CDN 헤더 → 직접 연결)
IP_HEADERS = (
    "HTTP_X_FORWARDED_FOR",
    "HTTP_X_REAL_IP",
    "HTTP_X_CLIENT_IP",
    "HTTP_CF_CONNECTING_IP",  # Cloudflare
    "HTTP_X_CLUSTER_CLIENT_IP",
    "HTTP_X_FORWARDED",
    "HTTP_FORWARDED_FOR",
    "HTTP_FORWARDED",
)

UNKNOWN_IP = "unknown"


def is_valid_ip(ip: str) -> bool:
    if not ip or ip == UNKNOWN_IP:
        return False
    try:
        ipaddress.ip_address(ip)
    except ValueError:
        return False
    return True


def extract_client_ip(meta) -> str:
    for header in IP_HEADERS:
        value = meta.get(header)
        if value:
            # X-Forwarded-For 는 "client, proxy1, proxy2" → 첫 번째만
            ip = value.split(",")[0].strip()
            if is_valid_ip(ip):
                return ip

    remote = meta.get("REMOTE_ADDR", "")
    if is_valid_ip(remote):
        return remote

    return UNKNOWN_IP


class ClientIPMiddleware:
    def __init__(self, get_response):
        self.get_response = get_response

    def __call__(self, request):
        request.client_ip = extract_client_ip(request.META)
        return self.get_response(request)

"""
Reachability probes run before any browser work.

Two things are checked: that the Nalanda site answers over HTTPS, and that
a browser answers on a remote-debugging endpoint when the bot is asked to
attach to one. A failure here is reported with hints instead of surfacing
later as an opaque navigation timeout.
"""

import json
import socket
import ssl
import urllib.error
import urllib.request
from typing import Tuple


USER_AGENT = 'Nalanda-Validation-Bot/1.0'

# Lower-case fragments of errors that usually mean the network path
# (VPN, proxy, DNS) is the problem rather than the site itself
NETWORK_PATH_INDICATORS = (
    'dns',
    'name resolution failed',
    'getaddrinfo failed',
    'gaierror',
    'connection refused',
    'connection timed out',
    'timeout',
    'timed out',
    'network unreachable',
    'no route to host',
    'tunnel',
    'proxy',
    'vpn',
)


def describe_network_error(reason, timeout: int) -> str:
    """
    One-line description of the reason behind a failed request.

    Args:
        reason: Exception (or string) carried by a URLError
        timeout: Timeout in seconds the request used

    Examples:
        >>> describe_network_error(socket.timeout(), 5)
        'Connection timeout after 5s'
    """
    if isinstance(reason, socket.timeout):
        return f"Connection timeout after {timeout}s"
    if isinstance(reason, socket.gaierror):
        return f"DNS resolution failed: {reason}"
    if isinstance(reason, ssl.SSLError):
        return f"SSL certificate error: {reason}"
    if isinstance(reason, ConnectionRefusedError):
        return f"Connection refused: {reason}"
    if isinstance(reason, OSError):
        return f"Network error: {reason}"
    return str(reason)


def check_site_connectivity(url: str, timeout: int = 10) -> Tuple[bool, str]:
    """
    Check that the site answers a HEAD request.

    Any 2xx or 3xx status counts as reachable: the application redirects
    anonymous visitors to its identity provider.

    Args:
        url: Site URL (e.g., "https://app.nalandaglobal.com")
        timeout: Timeout in seconds

    Returns:
        (True, "") when reachable, otherwise (False, description)
    """
    request = urllib.request.Request(url, method='HEAD')
    request.add_header('User-Agent', USER_AGENT)

    try:
        with urllib.request.urlopen(request, timeout=timeout) as response:
            if 200 <= response.status < 400:
                return (True, "")
            return (False, f"HTTP {response.status}: {response.reason}")
    except urllib.error.HTTPError as e:
        return (False, f"HTTP {e.code}: {e.reason}")
    except urllib.error.URLError as e:
        return (False, describe_network_error(e.reason, timeout))
    except (socket.timeout, ssl.SSLError) as e:
        return (False, describe_network_error(e, timeout))
    except ValueError as e:
        return (False, f"Invalid URL: {e}")
    except Exception as e:
        return (False, f"Unexpected error: {e}")


def cdp_version_url(cdp_url: str) -> str:
    """
    Version endpoint of a remote-debugging URL.

    Examples:
        >>> cdp_version_url("http://127.0.0.1:9222")
        'http://127.0.0.1:9222/json/version'
    """
    return f"{cdp_url.rstrip('/')}/json/version"


def is_cdp_available(cdp_url: str, timeout: float = 2.0) -> bool:
    """
    Check whether a browser answers on its remote-debugging endpoint.

    Args:
        cdp_url: Endpoint such as "http://127.0.0.1:9222"
        timeout: Timeout in seconds

    Returns:
        True if the endpoint returned a browser version document
    """
    if not cdp_url.startswith('http'):
        # ws:// endpoints cannot be probed over HTTP; let the connect attempt decide
        return True

    try:
        with urllib.request.urlopen(cdp_version_url(cdp_url), timeout=timeout) as response:
            if response.status != 200:
                return False
            payload = json.loads(response.read().decode('utf-8'))
    except (urllib.error.URLError, socket.timeout, ConnectionError, ValueError):
        return False

    return 'Browser' in payload or 'webSocketDebuggerUrl' in payload


def is_vpn_proxy_error(error_message: str) -> bool:
    """
    Whether an error looks like a VPN, proxy or DNS problem.

    Examples:
        >>> is_vpn_proxy_error("DNS resolution failed")
        True
        >>> is_vpn_proxy_error("HTTP 500 Internal Server Error")
        False
    """
    message = error_message.lower()
    return any(indicator in message for indicator in NETWORK_PATH_INDICATORS)


def format_connectivity_error(url: str, error_message: str, is_vpn_issue: bool) -> str:
    """
    Multi-line explanation of a failed connectivity check.

    Args:
        url: The URL that failed to connect
        error_message: Description returned by check_site_connectivity
        is_vpn_issue: Whether the error looks network-path related

    Returns:
        Text ready to print or show in a dialog
    """
    if is_vpn_issue:
        causes = [
            "VPN/Proxy not connected or not authenticated",
            "DNS cannot resolve the Nalanda hosts",
            "Firewall blocking the connection",
        ]
        checks = [
            "Your VPN/Proxy is turned ON and authenticated",
            "You can open Nalanda in a regular browser",
        ]
    else:
        causes = []
        checks = [
            "Your internet connection is working",
            "The Nalanda server is accessible",
        ]
    checks.append(f"The URL is correct: {url}")

    lines = [
        "NETWORK CONNECTIVITY CHECK FAILED",
        "",
        f"Could not reach Nalanda: {url}",
        f"Error: {error_message}",
        "",
    ]
    if causes:
        lines.append("This error is often caused by:")
        lines.extend(f"  - {cause}" for cause in causes)
        lines.append("")
        lines.append("Please ensure:")
    else:
        lines.append("Please check:")
    lines.extend(f"  {number}. {check}" for number, check in enumerate(checks, start=1))

    return "\n".join(lines)

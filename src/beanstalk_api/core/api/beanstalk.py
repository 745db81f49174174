"""
Direct XML-over-HTTPS communication with the Beanstalk API.
One method per documented operation, all routed through a single executor.
"""

import logging
import xml.etree.ElementTree as ET
from typing import Any, Dict, List, Mapping, Optional

import requests

from ...config import BeanstalkConfig
from ..exceptions import ApiError, ArgumentError, TransportError
from ..utils.http import get_authenticated_requests_session
from ..utils.xml import XmlField, build_xml, extract_errors, parse_xml
from ..validation import normalize_params, require, validate_credentials

log = logging.getLogger(__name__)

WRITE_VERBS = ("PUT", "POST")
ERROR_BODY_LIMIT = 2000

ACCOUNT_FIELDS = {"name": "name", "timezone": "time-zone"}
USER_FIELDS = {
    "email": "email",
    "first_name": "first-name",
    "last_name": "last-name",
    "password": "password",
    "admin": "admin",
    "timezone": "timezone",
}
PUBLIC_KEY_FIELDS = {"content": "content", "name": "name"}
REPOSITORY_FIELDS = {"name": "name", "title": "title", "color_label": "color-label"}
SERVER_ENVIRONMENT_FIELDS = {
    "name": "name",
    "automatic": "automatic",
    "branch_name": "branch-name",
}
RELEASE_SERVER_FIELDS = {
    "name": "name",
    "local_path": "local-path",
    "remote_path": "remote-path",
    "remote_addr": "remote-addr",
    "protocol": "protocol",
    "port": "port",
    "login": "login",
    "password": "password",
    "use_active_mode": "use-active-mode",
    "authenticate_by_key": "authenticate-by-key",
    "use_feat": "use-feat",
    "pre_release_hook": "pre-release-hook",
    "post_release_hook": "post-release-hook",
}

ParsedResponse = Optional[ET.Element]


def _color_label(value: Any) -> str:
    return f"label-{value}"


def _fields_from_params(
    params: Optional[Mapping[str, Any]], tags: Dict[str, str]
) -> List[XmlField]:
    """Map an update mapping onto XML fields using ``tags`` (snake -> element)."""
    fields: List[XmlField] = []
    for key, value in normalize_params(params, tags):
        if key == "color_label":
            value = _color_label(value)
        fields.append((tags[key], value))
    return fields


class BeanstalkClient:
    """
    Beanstalk client for the Beanstalk HTTP+XML API.

    Every resource method validates its arguments, builds the XML body for
    create and update calls and hands off to ``_execute``. Successful calls
    return the parsed XML root (``xml.etree.ElementTree.Element``), or None
    when the service sends back an empty body.

    Usage:
        with BeanstalkClient(BeanstalkConfig(account="example", ...)) as client:
            repos = client.find_all_repositories()
    """

    def __init__(self, config: Optional[BeanstalkConfig] = None):
        self.config = config or BeanstalkConfig.from_env()
        self.session: Optional[requests.Session] = None

    @classmethod
    def from_credentials(
        cls, account: str, username: str, password: str, **options: Any
    ) -> "BeanstalkClient":
        """Build a client from explicit credentials plus optional config fields."""
        validate_credentials(account, username, password)
        return cls(
            BeanstalkConfig(
                account=account, username=username, password=password, **options
            )
        )

    def _get_session(self) -> requests.Session:
        """Get or create the authenticated requests session."""
        if self.session is None:
            self.session = get_authenticated_requests_session(self.config)
        return self.session

    def _build_url(self, resource: str, sub_path: Optional[str] = None) -> str:
        url = f"{self.config.base_url}/{resource}"
        if sub_path:
            url = f"{url}/{sub_path}"
        return url

    def _execute(
        self,
        resource: str,
        sub_path: Optional[str] = None,
        verb: str = "GET",
        body: Optional[str] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> ParsedResponse:
        """Send one request and classify the outcome.

        Raises:
            TransportError: No HTTP response was obtained.
            ApiError: The response status was not 200.
            ParseError: A 200 response carried malformed XML.
        """
        session = self._get_session()
        url = self._build_url(resource, sub_path)
        data = body.encode("utf-8") if body and verb in WRITE_VERBS else None

        log.debug(f"Beanstalk Request: {verb} {url} params={params or {}}")
        if data:
            log.debug(f"Beanstalk Request Body: {len(data)} bytes")

        try:
            with session.request(
                verb,
                url,
                params=params,
                data=data,
                timeout=self.config.timeout,
                allow_redirects=True,
            ) as response:
                log.debug(f"Beanstalk Response Status: {response.status_code}")

                if response.status_code != 200:
                    log.warning(
                        f"Beanstalk request failed: {verb} {url} -> {response.status_code}"
                    )
                    raise ApiError(
                        response.status_code,
                        body=response.text[:ERROR_BODY_LIMIT],
                        errors=extract_errors(response.content),
                    )

                return parse_xml(response.content)

        except requests.RequestException as e:
            log.error(f"HTTP client error: {e}")
            raise TransportError(type(e).__name__, str(e)) from e

    #
    # Account
    #

    def get_account_details(self) -> ParsedResponse:
        """Return the account details."""
        return self._execute("account.xml")

    def update_account_details(self, params: Mapping[str, Any]) -> ParsedResponse:
        """Update the account. Accepts ``name`` and ``timezone``."""
        fields = _fields_from_params(params, ACCOUNT_FIELDS)
        return self._execute(
            "account.xml", verb="PUT", body=build_xml("account", fields)
        )

    #
    # Plans
    #

    def find_all_plans(self) -> ParsedResponse:
        """Return the available account plans."""
        return self._execute("plans.xml")

    #
    # Users
    #

    def find_all_users(self, page: Optional[int] = None) -> ParsedResponse:
        params = {"page": page} if page is not None else None
        return self._execute("users.xml", params=params)

    def find_single_user(self, user_id: Any) -> ParsedResponse:
        require(user_id=user_id)
        return self._execute("users", f"{user_id}.xml")

    def find_current_user(self) -> ParsedResponse:
        """Return the user whose credentials the client is using."""
        return self._execute("users", "current.xml")

    def create_user(
        self,
        login: str,
        email: str,
        first_name: str,
        last_name: str,
        password: str,
        admin: bool = False,
        timezone: Optional[str] = None,
    ) -> ParsedResponse:
        """Create a user. ``admin`` is always sent, ``timezone`` only if given."""
        require(
            login=login,
            email=email,
            first_name=first_name,
            last_name=last_name,
            password=password,
        )

        body = build_xml(
            "user",
            [
                ("login", login),
                ("email", email),
                ("first-name", first_name),
                ("last-name", last_name),
                ("password", password),
                ("admin", bool(admin)),
                ("timezone", timezone),
            ],
        )

        log.info(f"Creating user: {login}")
        return self._execute("users.xml", verb="POST", body=body)

    def update_user(self, user_id: Any, params: Mapping[str, Any]) -> ParsedResponse:
        """
        Update a user.

        Accepted keys: email, first_name, last_name, password, admin, timezone.
        """
        require(user_id=user_id)
        fields = _fields_from_params(params, USER_FIELDS)
        return self._execute(
            "users", f"{user_id}.xml", "PUT", build_xml("user", fields)
        )

    def delete_user(self, user_id: Any) -> ParsedResponse:
        require(user_id=user_id)
        log.info(f"Deleting user: {user_id}")
        return self._execute("users", f"{user_id}.xml", "DELETE")

    #
    # Public keys
    #

    def find_all_public_keys(self, user_id: Any = None) -> ParsedResponse:
        """Return public keys of the current user, or of ``user_id`` (admins only)."""
        params = {"user_id": user_id} if user_id is not None else None
        return self._execute("public_keys.xml", params=params)

    def find_single_public_key(self, key_id: Any) -> ParsedResponse:
        require(key_id=key_id)
        return self._execute("public_keys", f"{key_id}.xml")

    def create_public_key(
        self, content: str, name: Optional[str] = None, user_id: Any = None
    ) -> ParsedResponse:
        """Create a public key for the current user, or for ``user_id`` (admins only)."""
        require(content=content)
        body = build_xml(
            "public-key",
            [("content", content), ("name", name), ("user-id", user_id)],
        )
        return self._execute("public_keys.xml", verb="POST", body=body)

    def update_public_key(
        self, key_id: Any, params: Mapping[str, Any]
    ) -> ParsedResponse:
        """Update a public key. Accepts ``content`` and ``name``."""
        require(key_id=key_id)
        fields = _fields_from_params(params, PUBLIC_KEY_FIELDS)
        return self._execute(
            "public_keys", f"{key_id}.xml", "PUT", build_xml("public-key", fields)
        )

    def delete_public_key(self, key_id: Any) -> ParsedResponse:
        require(key_id=key_id)
        return self._execute("public_keys", f"{key_id}.xml", "DELETE")

    #
    # Repositories
    #

    def find_all_repositories(self, page: Optional[int] = None) -> ParsedResponse:
        params = {"page": page} if page is not None else None
        return self._execute("repositories.xml", params=params)

    def find_single_repository(self, repo_id: Any) -> ParsedResponse:
        require(repo_id=repo_id)
        return self._execute("repositories", f"{repo_id}.xml")

    def create_repository(
        self,
        name: str,
        title: str,
        type_id: Optional[str] = "subversion",
        create_structure: Optional[bool] = True,
        color_label: Optional[str] = "grey",
    ) -> ParsedResponse:
        """
        Create a repository.

        Args:
            name: Short name used in the repository URL.
            title: Human readable title.
            type_id: ``"git"`` or ``"subversion"``.
            create_structure: Create trunk/branches/tags (Subversion only).
            color_label: red, orange, yellow, green, blue, pink or grey.
        """
        require(name=name, title=title)

        body = build_xml(
            "repository",
            [
                ("name", name),
                ("type-id", type_id),
                ("title", title),
                ("create_structure", create_structure),
                (
                    "color-label",
                    _color_label(color_label) if color_label is not None else None,
                ),
            ],
        )

        log.info(f"Creating repository: {name}")
        return self._execute("repositories.xml", verb="POST", body=body)

    def update_repository(
        self, repo_id: Any, params: Mapping[str, Any]
    ) -> ParsedResponse:
        """Update a repository. Accepts ``name``, ``title`` and ``color_label``."""
        require(repo_id=repo_id)
        fields = _fields_from_params(params, REPOSITORY_FIELDS)
        return self._execute(
            "repositories", f"{repo_id}.xml", "PUT", build_xml("repository", fields)
        )

    #
    # User permissions
    #

    def find_user_permissions(self, user_id: Any) -> ParsedResponse:
        require(user_id=user_id)
        return self._execute("permissions", f"{user_id}.xml")

    def create_user_permissions(
        self,
        user_id: Any,
        repo_id: Any,
        read: bool = False,
        write: bool = False,
        full_deployments_access: bool = False,
        server_environment_id: Any = None,
    ) -> ParsedResponse:
        """
        Grant a user permissions on a repository, replacing existing ones.

        ``server_environment_id`` limits deployment access to one environment;
        ``full_deployments_access`` grants it for all of them.
        """
        require(user_id=user_id, repo_id=repo_id)

        body = build_xml(
            "permission",
            [
                ("user-id", user_id, "integer"),
                ("repository-id", repo_id, "integer"),
                ("read", read is True, "boolean"),
                ("write", write is True, "boolean"),
                ("full-deployments-access", full_deployments_access is True, "boolean"),
                ("server-environment-id", server_environment_id, "integer"),
            ],
        )
        return self._execute("permissions.xml", verb="POST", body=body)

    def delete_user_permissions(self, permission_id: Any) -> ParsedResponse:
        require(permission_id=permission_id)
        return self._execute("permissions", f"{permission_id}.xml", "DELETE")

    #
    # Changesets
    #

    def find_all_changesets(self, page: int = 1) -> ParsedResponse:
        """Return account-wide changesets, 15 per page."""
        return self._execute("changesets.xml", params={"page": page})

    def find_single_repository_changesets(
        self, repo_id: Any, page: int = 1
    ) -> ParsedResponse:
        require(repo_id=repo_id)
        return self._execute(
            "changesets",
            "repository.xml",
            params={"repository_id": repo_id, "page": page},
        )

    def find_single_changeset(self, repo_id: Any, revision: Any) -> ParsedResponse:
        require(repo_id=repo_id, revision=revision)
        return self._execute(
            "changesets", f"{revision}.xml", params={"repository_id": repo_id}
        )

    #
    # Comments
    #

    def find_all_comments(self, repo_id: Any, page: int = 1) -> ParsedResponse:
        require(repo_id=repo_id)
        return self._execute(str(repo_id), "comments.xml", params={"page": page})

    def find_all_changeset_comments(
        self, repo_id: Any, revision: Any
    ) -> ParsedResponse:
        require(repo_id=repo_id, revision=revision)
        return self._execute(
            str(repo_id), "comments.xml", params={"revision": revision}
        )

    def find_single_user_comments(self, user_id: Any, page: int = 1) -> ParsedResponse:
        require(user_id=user_id)
        return self._execute(
            "comments", "user.xml", params={"user_id": user_id, "page": page}
        )

    def find_single_comment(self, repo_id: Any, comment_id: Any) -> ParsedResponse:
        require(repo_id=repo_id, comment_id=comment_id)
        return self._execute(str(repo_id), f"comments/{comment_id}.xml")

    def create_comment(
        self,
        repo_id: Any,
        revision: Any,
        body: str,
        file_path: Optional[str] = None,
        line_number: Any = None,
    ) -> ParsedResponse:
        """
        Comment on a changeset.

        Without ``file_path`` and ``line_number`` the comment applies to the
        whole revision.
        """
        require(repo_id=repo_id, revision=revision, body=body)

        payload = build_xml(
            "comment",
            [
                ("revision", revision, "integer"),
                ("body", body),
                ("file-path", file_path),
                ("line-number", line_number),
            ],
        )
        return self._execute(str(repo_id), "comments.xml", "POST", payload)

    #
    # Server environments
    #

    def find_all_server_environments(self, repo_id: Any) -> ParsedResponse:
        require(repo_id=repo_id)
        return self._execute(str(repo_id), "server_environments.xml")

    def find_single_server_environment(
        self, repo_id: Any, environment_id: Any
    ) -> ParsedResponse:
        require(repo_id=repo_id, environment_id=environment_id)
        return self._execute(
            str(repo_id), f"server_environments/{environment_id}.xml"
        )

    def create_server_environment(
        self,
        repo_id: Any,
        name: str,
        automatic: bool = False,
        branch_name: Optional[str] = None,
    ) -> ParsedResponse:
        """Create a server environment. ``branch_name`` applies to Git only."""
        require(repo_id=repo_id, name=name)
        if not isinstance(automatic, bool):
            raise ArgumentError("automatic must be True or False", ("automatic",))

        body = build_xml(
            "server-environment",
            [("name", name), ("automatic", automatic), ("branch-name", branch_name)],
        )
        return self._execute(str(repo_id), "server_environments.xml", "POST", body)

    def update_server_environment(
        self, repo_id: Any, environment_id: Any, params: Mapping[str, Any]
    ) -> ParsedResponse:
        """Update a server environment. Accepts name, automatic, branch_name."""
        require(repo_id=repo_id, environment_id=environment_id)
        fields = _fields_from_params(params, SERVER_ENVIRONMENT_FIELDS)
        return self._execute(
            str(repo_id),
            f"server_environments/{environment_id}.xml",
            "PUT",
            build_xml("server-environment", fields),
        )

    #
    # Release servers
    #

    def find_all_release_servers(
        self, repo_id: Any, environment_id: Any
    ) -> ParsedResponse:
        require(repo_id=repo_id, environment_id=environment_id)
        return self._execute(
            str(repo_id),
            "release_servers.xml",
            params={"environment_id": environment_id},
        )

    def find_single_release_server(
        self, repo_id: Any, server_id: Any
    ) -> ParsedResponse:
        require(repo_id=repo_id, server_id=server_id)
        return self._execute(str(repo_id), f"release_servers/{server_id}.xml")

    def create_release_server(
        self,
        repo_id: Any,
        environment_id: Any,
        name: str,
        local_path: str,
        remote_path: str,
        remote_addr: str,
        login: str,
        password: Optional[str] = None,
        protocol: str = "ftp",
        port: int = 21,
        use_active_mode: Optional[bool] = None,
        authenticate_by_key: Optional[bool] = None,
        use_feat: Optional[bool] = True,
        pre_release_hook: Optional[str] = None,
        post_release_hook: Optional[str] = None,
    ) -> ParsedResponse:
        """
        Create an FTP or SFTP release server in a server environment.

        SFTP servers with ``authenticate_by_key=True`` authenticate with the
        account's deployment key, so no password is sent. Every other
        combination requires ``password``.
        """
        require(
            repo_id=repo_id,
            environment_id=environment_id,
            name=name,
            local_path=local_path,
            remote_path=remote_path,
            remote_addr=remote_addr,
            protocol=protocol,
            port=port,
            login=login,
        )

        key_auth = protocol == "sftp" and authenticate_by_key is True
        if not key_auth:
            require(password=password)

        fields: List[XmlField] = [
            ("name", name),
            ("local-path", local_path),
            ("remote-path", remote_path),
            ("remote-addr", remote_addr),
            ("login", login),
            ("protocol", "sftp" if protocol == "sftp" else "ftp"),
        ]
        if key_auth:
            fields.append(("authenticate-by-key", True))
        else:
            fields.append(("password", password))
        fields.extend(
            [
                ("port", port),
                ("use-active-mode", use_active_mode),
                ("use-feat", use_feat),
                ("pre-release-hook", pre_release_hook),
                ("post-release-hook", post_release_hook),
            ]
        )

        log.info(f"Creating release server: {name} ({protocol}://{remote_addr})")
        return self._execute(
            str(repo_id),
            "release_servers.xml",
            "POST",
            build_xml("release-server", fields),
            params={"environment_id": environment_id},
        )

    def update_release_server(
        self, repo_id: Any, server_id: Any, params: Mapping[str, Any]
    ) -> ParsedResponse:
        """
        Update a release server.

        Accepted keys: name, local_path, remote_path, remote_addr, protocol,
        port, login, password, use_active_mode, authenticate_by_key, use_feat,
        pre_release_hook, post_release_hook.
        """
        require(repo_id=repo_id, server_id=server_id)
        fields = _fields_from_params(params, RELEASE_SERVER_FIELDS)
        return self._execute(
            str(repo_id),
            f"release_servers/{server_id}.xml",
            "PUT",
            build_xml("release-server", fields),
        )

    def delete_release_server(self, repo_id: Any, server_id: Any) -> ParsedResponse:
        require(repo_id=repo_id, server_id=server_id)
        log.info(f"Deleting release server: {server_id}")
        return self._execute(str(repo_id), f"release_servers/{server_id}.xml", "DELETE")

    #
    # Releases
    #

    def find_all_releases(self, repo_id: Any, page: int = 1) -> ParsedResponse:
        """Return a repository's releases, 20 per page."""
        require(repo_id=repo_id)
        return self._execute(str(repo_id), "releases.xml", params={"page": page})

    def find_single_release(self, repo_id: Any, release_id: Any) -> ParsedResponse:
        require(repo_id=repo_id, release_id=release_id)
        return self._execute(str(repo_id), f"releases/{release_id}.xml")

    def create_release(
        self,
        repo_id: Any,
        environment_id: Any,
        revision: Any,
        comment: Optional[str] = None,
        deploy_from_scratch: bool = False,
    ) -> ParsedResponse:
        """Deploy ``revision`` to a server environment."""
        require(repo_id=repo_id, environment_id=environment_id, revision=revision)

        body = build_xml(
            "release",
            [
                ("revision", revision, "integer"),
                ("comment", comment),
                ("deploy-from-scratch", deploy_from_scratch is True),
            ],
        )

        log.info(
            f"Creating release of revision {revision} for environment {environment_id}"
        )
        return self._execute(
            str(repo_id),
            "releases.xml",
            "POST",
            body,
            params={"environment_id": environment_id},
        )

    def retry_release(self, repo_id: Any, release_id: Any) -> ParsedResponse:
        """Retry a failed release."""
        require(repo_id=repo_id, release_id=release_id)
        log.info(f"Retrying release: {release_id}")
        return self._execute(str(repo_id), f"releases/{release_id}/retry.xml", "PUT")

    def close(self):
        """Close the HTTP session."""
        if self.session is not None:
            self.session.close()
            self.session = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

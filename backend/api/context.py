from backend.core.authentication import (
    clear_auth_cookie, issue_access_token, principal_from_request, set_auth_cookie,
)
from backend.core.permissions import Principal


class GraphQLContext:
    """Per-request context handed to every resolver as ``info.context``.

    Holds the DRF request and the explicit authenticated ``principal``.
    Resolvers never touch the HTTP response; cookie changes are queued here
    and applied by the view once execution finishes.
    """

    def __init__(self, request):
        self.request = request
        self.principal = principal_from_request(request)
        self._cookie_actions = []

    def start_session(self, user):
        self._cookie_actions.append(('set', issue_access_token(user)))
        self.principal = Principal(user_id=user.pk, role=user.role)

    def end_session(self):
        self._cookie_actions.append(('clear', None))
        self.principal = None

    def apply_cookies(self, response):
        for action, token in self._cookie_actions:
            if action == 'set':
                set_auth_cookie(response, token)
            else:
                clear_auth_cookie(response)
        return response

import secrets


class SessionStore:
    def get(self, token):
        raise NotImplementedError

    def set(self, token, user_id):
        raise NotImplementedError

    def delete(self, token):
        raise NotImplementedError


class InMemorySessionStore(SessionStore):
    # tokens never expire; a restart drops them all
    def __init__(self):
        self._sessions = {}

    def get(self, token):
        return self._sessions.get(token)

    def set(self, token, user_id):
        self._sessions[token] = user_id

    def delete(self, token):
        self._sessions.pop(token, None)

    def __len__(self):
        return len(self._sessions)


def create_session(store, user_id):
    token = secrets.token_hex(32)
    store.set(token, user_id)
    return token

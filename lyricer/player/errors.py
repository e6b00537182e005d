class PlayerError(RuntimeError):
    pass


class PlayerUnavailable(PlayerError):
    pass


class AuthExpired(PlayerError):
    pass

"""Fatal error types. Failures of external commands are results, not exceptions."""


class GitwrtError(Exception):
    """Base class for errors that end the program."""


class PrerequisiteError(GitwrtError):
    def __init__(self, missing):
        self.missing = list(missing)
        super().__init__(f"Missing required tools: {' '.join(self.missing)}")


class CredentialError(GitwrtError):
    pass


class ConfigError(GitwrtError):
    pass

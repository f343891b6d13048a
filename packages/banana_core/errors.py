"""Error taxonomy for the loop sequencer."""


class BananaError(Exception):
    """Base exception for all sequencer errors"""
    pass


class DecodeFailed(BananaError):
    """Audio input could not be decoded (sample state is left unchanged)"""
    pass


class DeviceUnavailable(BananaError):
    """Audio device could not be opened or permission was denied"""
    pass


class NoActiveSample(BananaError):
    """A chop operation was requested while no sample is loaded"""
    pass


class ProjectFileError(BananaError):
    """Project description file is missing or invalid"""
    pass

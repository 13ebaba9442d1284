"""Shared constants and logger for the KiwiSDR client."""

import logging

log = logging.getLogger("kiwiclient")

KIWI_PORT               = 8073          # default KiwiSDR web/websocket port

DEFAULT_SAMPLE_RATE     = 12000         # audio-channel IQ rate (Hz)

DEFAULT_CENTER_FREQ_HZ  = 7050000.0

KEEPALIVE_INTERVAL_S    = 15.0          # server drops idle sessions well after this

RECEIVE_TIMEOUT_S       = 1.0           # upper bound on one receive wait

CLIENT_IDENT            = "KiwiClient"

USER_AGENT              = "KiwiClient/python"

CONTROL_PREFIX          = b"MSG "       # server-side text tagged as binary

HEADER_SIZE             = 4             # seq(2) + flags(1) + smeter(1)

# Fixed AGC parameters sent during the handshake
AGC_DEFAULTS = {
    "hang": 0,
    "thresh": -110,
    "slope": 6,
    "decay": 1000,
    "manGain": 50,
}

# IQ passband, Hz relative to the tuned frequency
PASSBAND_LOW_HZ  = -6000
PASSBAND_HIGH_HZ = 6000

"""Internal constants shared across the library."""

DEFAULT_ENDPOINT = "https://api-staging-buildot.machinesensiot.xyz/api/Dashboard/GetAssetDevicesData"
DEFAULT_ASSET_ID = 6141
READINGS_FIELD = "waterTreatmentPlantComponentsData"
USER_AGENT = "wtpsync/1"

# ------------------------------------------------------------------
# Animation constants (radians per second unless noted)
# ------------------------------------------------------------------

PUMP_PULSE_BASE = 0.3
PUMP_PULSE_AMPLITUDE = 0.1
PUMP_PULSE_FREQUENCY = 5.0
PUMP_VIBRATION_AMPLITUDE = 0.02
PUMP_VIBRATION_FREQUENCY = 30.0

BLINK_FREQUENCY = 5.0
BLINK_INTENSITY = 0.5

PIPE_PULSE_BASE = 0.1
PIPE_PULSE_AMPLITUDE = 0.05
PIPE_PULSE_FREQUENCY = 3.0

MIXER_RATE = 2.0
SCRAPER_RATE = 0.5

#: Turbidity (NTU) at which raw water is drawn fully in the raw-water color.
TURBIDITY_FULL_SCALE = 100.0

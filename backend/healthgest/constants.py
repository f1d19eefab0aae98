"""Shared constants for the dashboard pipeline."""

# Sentinel shown for any missing display value
NOT_AVAILABLE = "N/A"

# Dead band below which a week-over-week change is reported as stable
CHANGE_DEAD_BAND = 0.1

# Risk factors at or below this severity are not displayed
RISK_DISPLAY_THRESHOLD = 0.2

# Chart row keys (shared with the frontend chart dataKeys)
WEEK_KEY = "GESTATIONAL_AGE_WEEKS"

WEIGHT_KEY = "MATERNAL_WEIGHT"
FUNDAL_KEY = "FUNDAL_HEIGHT"
HEMOGLOBIN_KEY = "HEMOGLOBIN_LEVEL"
SYSTOLIC_KEY = "BP_SYSTOLIC"
DIASTOLIC_KEY = "BP_DIASTOLIC"

PREDICTED_WEIGHT_KEY = "PREDICTED_WEIGHT"
PREDICTED_FUNDAL_KEY = "PREDICTED_FUNDAL_HEIGHT"
PREDICTED_HEMOGLOBIN_KEY = "PREDICTED_HEMOGLOBIN_LEVEL"
PREDICTED_SYSTOLIC_KEY = "PREDICTED_BP_SYSTOLIC"
PREDICTED_DIASTOLIC_KEY = "PREDICTED_BP_DIASTOLIC"

# Population reference curve keys as returned by the prediction service
AVERAGE_WEIGHT_KEY = "averageWeight"
AVERAGE_FUNDAL_KEY = "averageFundal"
AVERAGE_HEMOGLOBIN_KEY = "averageHemoglobin"
AVERAGE_BP_KEY = "averageBloodPressure"

# Remote backend paths
PREDICTION_PATH = "/api/ai/ongoing-progression"
HOME_SUMMARY_PATH = "/api/home-summary"
INSIGHT_PATHS: dict[str, str] = {
    "diet": "/api/ai/diet-plan",
    "exercise": "/api/ai/exercise-plan",
}
INSIGHT_TITLES: dict[str, str] = {
    "diet": "Diet Plan With AI",
    "exercise": "Exercise Plan With AI",
}
# Response field carrying the generated plan text
INSIGHT_FIELDS: dict[str, str] = {
    "diet": "dietPlan",
    "exercise": "exercisePlan",
}

# Keys of the rows inside the population reference curves
AVG_WEIGHT_KEY = "AVG_WEIGHT"
AVG_FUNDAL_KEY = "AVG_FUNDAL"
AVG_HB_KEY = "AVG_HB"
AVG_SYSTOLIC_KEY = "AVG_SYSTOLIC"
AVG_DIASTOLIC_KEY = "AVG_DIASTOLIC"

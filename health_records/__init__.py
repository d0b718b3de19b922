"""Health records API: BMI assessment over stored biometrics."""

"""SQS/SNS (or local redis) delivery for CSV parse requests."""

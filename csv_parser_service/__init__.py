"""CSV parser service: employee and previous-assignment CSV extraction over HTTP or SQS/SNS."""

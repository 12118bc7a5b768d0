"""Cognito post-confirmation trigger that registers users in the database."""
from typing import Any

from aws_cdk import CfnOutput, Duration, Stack
from aws_cdk import aws_lambda as _lambda
from constructs import Construct

from stacks.lambda_code import RUNTIME, grant_database_access, lambda_code


class CognitoPostConfirmationStack(Stack):

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        system_name: str,
        database_name: str,
        **kwargs: Any,
    ) -> None:
        super().__init__(scope, construct_id, **kwargs)

        function_name = f'{system_name}-post-confirmation'

        self.function = _lambda.Function(
            self,
            function_name,
            function_name=function_name,
            runtime=RUNTIME,
            handler='post_confirmation.handler',
            code=lambda_code(),
            timeout=Duration.seconds(10),
            environment={'POSTGRES_DATABASE_NAME': database_name},
        )

        grant_database_access(self.function, self.region, self.account)

        CfnOutput(
            self,
            'PostConfirmationLambdaArn',
            value=self.function.function_arn,
            description='ARN of the PostConfirmation Lambda function',
        )

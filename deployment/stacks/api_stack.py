"""
CDK stack that wires up

custom domain (ACM, Route 53 A/AAAA)  ➜  API Gateway {proxy+}  ➜  Lambda

Every path is proxied to index.lambda_handler, which does its own routing.
"""
from typing import Any, Optional

from aws_cdk import CfnOutput, Duration, RemovalPolicy, Stack
from aws_cdk import aws_apigateway as apigw
from aws_cdk import aws_certificatemanager as acm
from aws_cdk import aws_lambda as _lambda
from aws_cdk import aws_route53 as route53
from aws_cdk import aws_route53_targets as targets
from aws_cdk import aws_s3 as s3
from constructs import Construct

from stacks.lambda_code import RUNTIME, grant_database_access, lambda_code


class ApiStack(Stack):

    def __init__(
        self,
        scope: Construct,
        construct_id: str,
        bucket: s3.IBucket,
        domain_name: Optional[str] = None,
        hosted_zone_id: Optional[str] = None,
        hosted_zone_name: Optional[str] = None,
        api_subdomain: Optional[str] = None,
        database_name: Optional[str] = None,
        cdn_domain: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        super().__init__(scope, construct_id, **kwargs)

        if not (domain_name and hosted_zone_id and hosted_zone_name and api_subdomain):
            raise ValueError(
                'Unexpected missing hosted_zone_name || hosted_zone_id || domain_name || api_subdomain'
            )

        api_domain_name = f'{api_subdomain}.{domain_name}'

        zone = route53.HostedZone.from_hosted_zone_attributes(
            self,
            'ImportedHostedZone',
            hosted_zone_id=hosted_zone_id,
            zone_name=hosted_zone_name,
        )

        certificate = acm.Certificate(
            self,
            'ApiCertificate',
            domain_name=api_domain_name,
            validation=acm.CertificateValidation.from_dns(zone),
        )
        certificate.apply_removal_policy(RemovalPolicy.RETAIN)

        environment = {'S3_BUCKET_NAME': bucket.bucket_name}
        if database_name:
            environment['POSTGRES_DATABASE_NAME'] = database_name
        if cdn_domain:
            environment['CLOUDFRONT_DOMAIN'] = cdn_domain

        self.function = _lambda.Function(
            self,
            'ImageServiceFunction',
            runtime=RUNTIME,
            handler='index.lambda_handler',
            code=lambda_code(),
            timeout=Duration.seconds(30),
            memory_size=256,
            environment=environment,
        )

        bucket.grant_put(self.function)
        grant_database_access(self.function, self.region, self.account)

        api = apigw.RestApi(
            self,
            'ApiServer',
            rest_api_name='Image Service API',
            description='API Gateway for Image Service',
            endpoint_configuration=apigw.EndpointConfiguration(types=[apigw.EndpointType.REGIONAL]),
            default_cors_preflight_options=apigw.CorsOptions(
                allow_origins=apigw.Cors.ALL_ORIGINS,
                allow_methods=['GET', 'POST', 'PUT', 'DELETE', 'OPTIONS'],
                allow_headers=['Content-Type', 'Authorization'],
            ),
        )

        integration = apigw.LambdaIntegration(self.function, proxy=True)
        api.root.add_resource('{proxy+}').add_method('ANY', integration)
        api.root.add_method('ANY', integration)

        api_domain = apigw.DomainName(
            self,
            'ApiDomain',
            domain_name=api_domain_name,
            certificate=certificate,
            security_policy=apigw.SecurityPolicy.TLS_1_2,
            endpoint_type=apigw.EndpointType.REGIONAL,
        )
        api_domain.add_base_path_mapping(api)

        alias_target = route53.RecordTarget.from_alias(targets.ApiGatewayDomain(api_domain))
        route53.ARecord(self, 'ApiARecord', zone=zone, record_name=api_subdomain, target=alias_target)
        route53.AaaaRecord(self, 'ApiAaaaRecord', zone=zone, record_name=api_subdomain, target=alias_target)

        CfnOutput(self, 'ApiUrl', value=f'https://{api_domain_name}')
        CfnOutput(self, 'ApiGatewayUrl', value=api.url)

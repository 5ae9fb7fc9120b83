from rest_framework import serializers


class LoginRequestSerializer(serializers.Serializer):
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, trim_whitespace=False)


class RegisterRequestSerializer(serializers.Serializer):
    name = serializers.CharField(max_length=150)
    email = serializers.EmailField()
    password = serializers.CharField(write_only=True, min_length=6, trim_whitespace=False)
    confirmPassword = serializers.CharField(write_only=True, trim_whitespace=False)


class SignedInResponseSerializer(serializers.Serializer):
    user = serializers.DictField()
    redirect = serializers.CharField()


class MeResponseSerializer(serializers.Serializer):
    signedIn = serializers.BooleanField()
    user = serializers.DictField(allow_null=True)


class DetailResponseSerializer(serializers.Serializer):
    detail = serializers.CharField()

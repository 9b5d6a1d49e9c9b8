"""JOSE command line interface.

Payloads are read from standard input, results written to standard
output.

"""
import argparse
import logging
import sys

from josepy import json_util

from josecrypto import algorithms
from josecrypto import constants
from josecrypto import encrypters
from josecrypto import errors
from josecrypto import header as jose_header
from josecrypto import jwe
from josecrypto import jwk
from josecrypto import jws
from josecrypto import signers

logger = logging.getLogger(__name__)


class CLI:
    """JOSE CLI."""

    @classmethod
    def _load_key(cls, args) -> jwk.JWK:
        key = jwk.JWK.load(args.key.read())
        args.key.close()
        return key

    @classmethod
    def sign(cls, args):
        """Sign."""
        key = cls._load_key(args)
        jws_object = jws.JWSObject(jose_header.JWSHeader(alg=args.alg, kid=args.kid),
                                   sys.stdin.read().encode())
        jws_object.sign(signers.signer_for(key))
        print(jws_object.serialize())
        return 0

    @classmethod
    def verify(cls, args):
        """Verify."""
        key = cls._load_key(args)
        jws_object = jws.JWSObject.parse(sys.stdin.read())
        verified = jws_object.verify(signers.verifier_for(key.public_key()))
        if verified:
            sys.stdout.flush()
            sys.stdout.buffer.write(jws_object.payload)
        return not verified

    @classmethod
    def encrypt(cls, args):
        """Encrypt."""
        key = cls._load_key(args)
        jwe_object = jwe.JWEObject(
            jose_header.JWEHeader(alg=args.alg, enc=args.enc, kid=args.kid,
                                  zip=constants.DEFLATE if args.zip else None),
            sys.stdin.read().encode())
        jwe_object.encrypt(encrypters.encrypter_for(key, args.alg))
        print(jwe_object.serialize())
        return 0

    @classmethod
    def decrypt(cls, args):
        """Decrypt."""
        key = cls._load_key(args)
        jwe_object = jwe.JWEObject.parse(sys.stdin.read())
        jwe_object.decrypt(encrypters.decrypter_for(key, jwe_object.header.alg))
        sys.stdout.flush()
        sys.stdout.buffer.write(jwe_object.payload)
        return 0

    @classmethod
    def thumbprint(cls, args):
        """Print the RFC 7638 thumbprint of the key."""
        print(json_util.encode_b64jose(cls._load_key(args).thumbprint()))
        return 0

    @classmethod
    def _jws_alg_type(cls, arg):
        return algorithms.JWSAlgorithm.parse(arg)

    @classmethod
    def _jwe_alg_type(cls, arg):
        return algorithms.JWEAlgorithm.parse(arg)

    @classmethod
    def _enc_type(cls, arg):
        return algorithms.EncryptionMethod.parse(arg)

    @classmethod
    def run(cls, args=None):
        """Parse arguments and run the command."""
        parser = argparse.ArgumentParser(prog='josecrypto')
        parser.add_argument('-v', '--verbose', action='store_true')

        subparsers = parser.add_subparsers(dest='command', required=True)

        def add_parser(name, func):
            subparser = subparsers.add_parser(name, help=func.__doc__)
            subparser.set_defaults(func=func)
            subparser.add_argument(
                '-k', '--key', type=argparse.FileType('rb'), required=True,
                help='JWK, or PEM/DER key; anything else is a symmetric key')
            return subparser

        parser_sign = add_parser('sign', cls.sign)
        parser_sign.add_argument(
            '-a', '--alg', type=cls._jws_alg_type, default=algorithms.RS256)
        parser_sign.add_argument('--kid')

        add_parser('verify', cls.verify)

        parser_encrypt = add_parser('encrypt', cls.encrypt)
        parser_encrypt.add_argument(
            '-a', '--alg', type=cls._jwe_alg_type, default=algorithms.RSA_OAEP_256)
        parser_encrypt.add_argument(
            '-e', '--enc', type=cls._enc_type, default=algorithms.A128GCM)
        parser_encrypt.add_argument('--kid')
        parser_encrypt.add_argument('--zip', action='store_true',
                                    help='DEFLATE the payload before encryption')

        add_parser('decrypt', cls.decrypt)
        add_parser('thumbprint', cls.thumbprint)

        parsed = parser.parse_args(args)
        logging.basicConfig(level=logging.DEBUG if parsed.verbose else logging.WARNING)
        try:
            return parsed.func(parsed)
        except errors.Error as error:
            logger.debug(error, exc_info=True)
            print(error, file=sys.stderr)
            return -1


def main(args=None):
    """Console script entry point."""
    return CLI.run(args)


if __name__ == '__main__':
    sys.exit(main())  # pragma: no cover

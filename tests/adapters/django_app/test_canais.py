"""
Testes dos canais de envio (Twilio SMS e email Django).

O SDK da Twilio é substituído por mock; o email usa o backend locmem.
"""

from unittest import mock

import pytest
from django.core import mail

from portal_lgpd.adapters.django_app.lgpd.canais import DjangoEmailChannel, TwilioSMSChannel
from portal_lgpd.core.lgpd.entities import CanalVerificacao
from portal_lgpd.core.lgpd.verificacao import VerificacaoCodigoService, comparar_codigo
from portal_lgpd.core.shared.exceptions import ConfiguracaoCanalError


CLIENT_PATH = 'portal_lgpd.adapters.django_app.lgpd.canais.Client'


@pytest.fixture
def canal_sms():
    return TwilioSMSChannel('AC123', 'token', '+15550001111', timeout=5)


class TestTwilioSMSChannel:
    """Testes para TwilioSMSChannel."""

    def test_envia_pelo_sdk(self, canal_sms):
        with mock.patch(CLIENT_PATH) as client_cls:
            client_cls.return_value.messages.create.return_value.sid = 'SM1'

            canal_sms.enviar('+5511987654321', 'Seu código é 123456')

        client_cls.assert_called_once()
        assert client_cls.call_args.args == ('AC123', 'token')
        client_cls.return_value.messages.create.assert_called_once_with(
            body='Seu código é 123456', from_='+15550001111', to='+5511987654321',
        )

    def test_reutiliza_cliente(self, canal_sms):
        with mock.patch(CLIENT_PATH) as client_cls:
            canal_sms.enviar('+5511987654321', 'a')
            canal_sms.enviar('+5511987654321', 'b')

        assert client_cls.call_count == 1

    def test_nao_configurado(self):
        """Deve lançar ConfiguracaoCanalError sem credenciais."""
        canal = TwilioSMSChannel(None, None, None)

        assert canal.configurado is False
        with pytest.raises(ConfiguracaoCanalError):
            canal.enviar('+5511987654321', 'x')

    def test_erro_do_sdk_propaga(self, canal_sms):
        with mock.patch(CLIENT_PATH) as client_cls:
            client_cls.return_value.messages.create.side_effect = RuntimeError("21211 invalid number")

            with pytest.raises(RuntimeError):
                canal_sms.enviar('+5511987654321', 'x')


class TestDjangoEmailChannel:

    def test_envia_email(self):
        DjangoEmailChannel(from_email='lgpd@igreja.test', timeout=5).enviar(
            'maria@exemplo.com', 'corpo', assunto='Código',
        )

        assert len(mail.outbox) == 1
        assert mail.outbox[0].subject == 'Código'
        assert mail.outbox[0].from_email == 'lgpd@igreja.test'


class TestFallbackComCanaisReais:
    """VerificacaoCodigoService usando os adapters concretos."""

    def test_sms_falha_cai_para_email(self, canal_sms):
        """Deve enviar por email quando o Twilio rejeita o SMS."""
        service = VerificacaoCodigoService(
            canal_sms, DjangoEmailChannel('lgpd@igreja.test'), bcrypt_rounds=4,
        )

        with mock.patch(CLIENT_PATH) as client_cls:
            client_cls.return_value.messages.create.side_effect = RuntimeError("timeout")
            resultado = service.enviar_codigo_verificacao(
                'Maria Silva', telefone='11987654321', email='maria@exemplo.com',
            )

        assert resultado.sucesso
        assert resultado.canal == CanalVerificacao.EMAIL
        codigo = mail.outbox[0].body.split('Código de verificação: ')[1][:6]
        assert comparar_codigo(codigo, resultado.hashed_codigo)
